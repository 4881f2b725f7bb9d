"""Service layer entry points for Journal Feed."""

from __future__ import annotations

from .aggregator import ArticleAggregator, ArticleFeed, search_articles  # noqa: F401
from .extractor import build_articles, extract_entries  # noqa: F401
from .fetcher import ListingFetcher  # noqa: F401
from .playback import PlaybackController, compose_topic_brief  # noqa: F401
from .summary import resolve_summary  # noqa: F401

__all__ = [
    "ArticleAggregator",
    "ArticleFeed",
    "ListingFetcher",
    "PlaybackController",
    "build_articles",
    "compose_topic_brief",
    "extract_entries",
    "resolve_summary",
    "search_articles",
]
