"""HTTP retrieval of journal listing pages."""

from __future__ import annotations

import logging

import requests

from journalfeed.config import FeedSettings, Source
from journalfeed.exceptions import FailureKind, FetchError
from journalfeed.models import FetchResult

__all__ = ["ListingFetcher"]

logger = logging.getLogger(__name__)


class ListingFetcher:
    """Fetch a source's listing page and decode it as UTF-8 text.

    Every call goes to the network; nothing is retried or cached.
    """

    def __init__(
        self,
        settings: FeedSettings | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings or FeedSettings()
        self._session = session or requests.Session()
        self._headers = {"User-Agent": self._settings.user_agent}

    def fetch(self, source: Source) -> FetchResult:
        """Return the decoded listing page for ``source``.

        Raises:
            FetchError: On transport failure, a non-2xx status (unless
                ``strict_status`` is disabled), or a body that is not UTF-8.
        """

        url = str(source.url)

        try:
            response = self._session.get(url, headers=self._headers, timeout=self._settings.timeout)
        except requests.RequestException as exc:
            raise FetchError(
                f"Request to {url} failed: {exc}",
                kind=FailureKind.TRANSPORT,
                source=source.identifier,
            ) from exc

        status_code = response.status_code
        if not 200 <= status_code < 300:
            if self._settings.strict_status:
                raise FetchError(
                    f"{url} responded with HTTP {status_code}",
                    kind=FailureKind.HTTP_STATUS,
                    source=source.identifier,
                    status_code=status_code,
                )
            logger.warning("Using body of HTTP %s response from %s", status_code, url)

        try:
            text = response.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise FetchError(
                f"Response from {url} is not valid UTF-8: {exc.reason}",
                kind=FailureKind.DECODE,
                source=source.identifier,
            ) from exc

        logger.debug("Fetched %d characters from %s", len(text), url)
        return FetchResult(source=source, text=text)
