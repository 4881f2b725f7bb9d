"""Aggregate refresh across all sources and the feed state coordinator."""

from __future__ import annotations

import concurrent.futures
import datetime
import logging
import threading
from typing import Callable, List, Sequence

from pydantic import BaseModel, Field

from journalfeed.config import SOURCES, FeedSettings, Source
from journalfeed.exceptions import AggregateError, FailureKind, FetchError
from journalfeed.models import Article, FeedState, SourceFailure
from journalfeed.services.extractor import build_articles
from journalfeed.services.fetcher import ListingFetcher

__all__ = [
    "AggregateResult",
    "ArticleAggregator",
    "ArticleFeed",
    "SourceCrawlResult",
    "search_articles",
]

logger = logging.getLogger(__name__)

FeedObserver = Callable[[FeedState], None]


class SourceCrawlResult(BaseModel):
    """Articles produced by one source, or the reason it produced none."""

    source: Source
    articles: List[Article] = Field(default_factory=list)
    failure: SourceFailure | None = None


class AggregateResult(BaseModel):
    """Merged, title-sorted articles plus failures of the sources that were skipped."""

    articles: List[Article] = Field(default_factory=list)
    failures: List[SourceFailure] = Field(default_factory=list)


def search_articles(articles: Sequence[Article], topic: str) -> List[Article]:
    """Return articles whose title or summary contains ``topic``, ignoring case.

    An empty topic matches everything.
    """

    if not topic:
        return list(articles)

    query = topic.lower()
    return [
        article
        for article in articles
        if query in article.title.lower() or query in article.summary.lower()
    ]


class ArticleAggregator:
    """Run fetch, extract and summarise for every source, isolating failures."""

    def __init__(
        self,
        fetcher: ListingFetcher | None = None,
        settings: FeedSettings | None = None,
    ) -> None:
        self._settings = settings or FeedSettings()
        self._fetcher = fetcher or ListingFetcher(settings=self._settings)

    def collect_source(
        self, source: Source, cancel_event: threading.Event | None = None
    ) -> SourceCrawlResult:
        """Return the articles for a single source; failures are captured, not raised."""

        if cancel_event is not None and cancel_event.is_set():
            logger.info("Refresh cancelled before fetching %s", source.identifier)
            failure = SourceFailure(
                source=source.identifier,
                kind=FailureKind.CANCELLED,
                message="Refresh was cancelled",
            )
            return SourceCrawlResult(source=source, failure=failure)

        try:
            page = self._fetcher.fetch(source)
        except FetchError as exc:
            logger.warning("Failed to fetch %s: %s", source.identifier, exc)
            return SourceCrawlResult(source=source, failure=SourceFailure.from_error(source, exc))

        articles = build_articles(page.text, source)
        logger.info("Extracted %d articles from %s", len(articles), source.display_name)
        return SourceCrawlResult(source=source, articles=articles)

    def collect(
        self, sources: Sequence[Source], cancel_event: threading.Event | None = None
    ) -> AggregateResult:
        """Collect every source, merge in declaration order and sort by title.

        Raises:
            AggregateError: If every source failed.
        """

        if self._settings.concurrent_fetch and len(sources) > 1:
            workers = min(self._settings.max_workers, len(sources))
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(self.collect_source, source, cancel_event) for source in sources
                ]
                results = [future.result() for future in futures]
        else:
            results = [self.collect_source(source, cancel_event) for source in sources]

        failures = [result.failure for result in results if result.failure is not None]
        if sources and len(failures) == len(sources):
            raise AggregateError(failures)

        merged = [article for result in results for article in result.articles]
        merged.sort(key=lambda article: article.title)
        return AggregateResult(articles=merged, failures=failures)


class ArticleFeed:
    """Single owner of the published :class:`FeedState`.

    Only :meth:`refresh` mutates the state. Consumers read snapshots through
    :attr:`state` or register observers with :meth:`subscribe`.
    """

    def __init__(
        self,
        aggregator: ArticleAggregator | None = None,
        sources: Sequence[Source] | None = None,
        settings: FeedSettings | None = None,
    ) -> None:
        self._aggregator = aggregator or ArticleAggregator(settings=settings)
        self._sources = tuple(sources) if sources is not None else SOURCES
        self._refresh_lock = threading.Lock()
        self._cancel_event = threading.Event()
        self._observers: List[FeedObserver] = []
        self._state = FeedState()

    @property
    def sources(self) -> tuple[Source, ...]:
        return self._sources

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def articles(self) -> tuple[Article, ...]:
        return self._state.articles

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    @property
    def error_message(self) -> str | None:
        return self._state.error_message

    def subscribe(self, observer: FeedObserver) -> Callable[[], None]:
        """Register ``observer`` for every published state; returns an unsubscribe callable."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def cancel(self) -> None:
        """Ask an in-flight refresh to skip the sources it has not fetched yet."""

        self._cancel_event.set()

    def search_articles(self, topic: str) -> List[Article]:
        return search_articles(self._state.articles, topic)

    def refresh(self) -> bool:
        """Fetch every source and publish the merged article list.

        Returns ``False`` without doing anything when a refresh is already running.
        On failure the previous articles stay in place and ``error_message`` is set.
        """

        if not self._refresh_lock.acquire(blocking=False):
            logger.info("Refresh already in progress, ignoring request")
            return False

        try:
            self._cancel_event.clear()
            self._publish(self._state.model_copy(update={"is_loading": True}))

            try:
                result = self._aggregator.collect(self._sources, cancel_event=self._cancel_event)
            except AggregateError as exc:
                logger.error("Refresh failed: %s", exc)
                next_state = self._state.model_copy(
                    update={
                        "is_loading": False,
                        "error_message": f"Unable to load articles: {exc.message}",
                        "failures": tuple(exc.failures),
                    }
                )
            except Exception as exc:  # noqa: BLE001 - the previous list must survive any failure
                logger.exception("Refresh failed unexpectedly")
                next_state = self._state.model_copy(
                    update={
                        "is_loading": False,
                        "error_message": f"Unable to load articles: {exc}",
                        "failures": (),
                    }
                )
            else:
                logger.info(
                    "Refreshed %d articles from %d sources (%d failed)",
                    len(result.articles),
                    len(self._sources),
                    len(result.failures),
                )
                next_state = FeedState(
                    articles=tuple(result.articles),
                    is_loading=False,
                    error_message=None,
                    failures=tuple(result.failures),
                    refreshed_at=datetime.datetime.now(datetime.UTC),
                )

            self._publish(next_state)
        finally:
            self._refresh_lock.release()

        return True

    def _publish(self, state: FeedState) -> None:
        self._state = state
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception:  # noqa: BLE001 - one observer must not break the refresh
                logger.exception("Feed observer %r failed", observer)
