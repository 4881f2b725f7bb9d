"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI

from journalfeed.api.routes import router
from journalfeed.config import FeedSettings
from journalfeed.services.aggregator import ArticleFeed


def create_app(feed: ArticleFeed | None = None) -> FastAPI:
    app = FastAPI(title="Journal Feed", description="Infectious disease journal article feed API")
    app.state.feed = feed or ArticleFeed(settings=FeedSettings.from_env())
    app.include_router(router, prefix="/api")
    return app


app = create_app()
