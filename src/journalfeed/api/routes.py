"""API routes exposing the article feed."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from journalfeed.models import Article, FeedState, SourceFailure
from journalfeed.services.aggregator import ArticleFeed
from journalfeed.services.playback import SUGGESTED_TOPICS, compose_topic_brief

logger = logging.getLogger(__name__)

router = APIRouter()


class SourceEntry(BaseModel):
    identifier: str
    name: str
    url: str


class SourcesResponse(BaseModel):
    sources: List[SourceEntry] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    started: bool
    state: FeedState


class SearchResponse(BaseModel):
    topic: str
    articles: List[Article] = Field(default_factory=list)


class TopicEntry(BaseModel):
    topic: str
    matches: int


class TopicsResponse(BaseModel):
    topics: List[TopicEntry] = Field(default_factory=list)


class TopicBriefResponse(BaseModel):
    topic: str
    matches: int
    brief: str


class FailuresResponse(BaseModel):
    error_message: str | None = None
    failures: List[SourceFailure] = Field(default_factory=list)


def get_feed(request: Request) -> ArticleFeed:
    """Return the feed coordinator owned by the running application."""

    return request.app.state.feed


@router.get("/sources", response_model=SourcesResponse)
async def list_sources(feed: ArticleFeed = Depends(get_feed)) -> SourcesResponse:
    """Return the journals the feed pulls articles from."""

    return SourcesResponse(
        sources=[
            SourceEntry(identifier=source.identifier, name=source.display_name, url=str(source.url))
            for source in feed.sources
        ]
    )


@router.get("/articles", response_model=FeedState)
async def list_articles(feed: ArticleFeed = Depends(get_feed)) -> FeedState:
    """Return the latest published feed state."""

    return feed.state


@router.post("/refresh", response_model=RefreshResponse)
async def trigger_refresh(feed: ArticleFeed = Depends(get_feed)) -> RefreshResponse:
    """Fetch every source again; a refresh already in flight makes this a no-op."""

    started = await run_in_threadpool(feed.refresh)
    if not started:
        logger.info("Refresh request ignored while another refresh is running")
    return RefreshResponse(started=started, state=feed.state)


@router.get("/articles/search", response_model=SearchResponse)
async def search(topic: str = "", feed: ArticleFeed = Depends(get_feed)) -> SearchResponse:
    """Return articles whose title or summary mention ``topic``."""

    return SearchResponse(topic=topic, articles=feed.search_articles(topic))


@router.get("/status", response_model=FailuresResponse)
async def refresh_status(feed: ArticleFeed = Depends(get_feed)) -> FailuresResponse:
    """Return the error message and per-source failures of the last refresh."""

    state = feed.state
    return FailuresResponse(error_message=state.error_message, failures=list(state.failures))


@router.get("/topics", response_model=TopicsResponse)
async def list_topics(feed: ArticleFeed = Depends(get_feed)) -> TopicsResponse:
    """Return the suggested quick topics with the number of matching articles."""

    return TopicsResponse(
        topics=[
            TopicEntry(topic=topic, matches=len(feed.search_articles(topic)))
            for topic in SUGGESTED_TOPICS
        ]
    )


@router.get("/topics/{topic}/brief", response_model=TopicBriefResponse)
async def topic_brief(topic: str, feed: ArticleFeed = Depends(get_feed)) -> TopicBriefResponse:
    """Return the spoken brief text for ``topic``."""

    normalised = topic.strip()
    if not normalised:
        raise HTTPException(status_code=400, detail="A topic is required for a brief.")

    matches = feed.search_articles(normalised)
    return TopicBriefResponse(
        topic=normalised,
        matches=len(matches),
        brief=compose_topic_brief(normalised, matches),
    )
