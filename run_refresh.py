"""Convenience script for running a single feed refresh locally."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Ensure the src directory is on the Python path so the journalfeed package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from journalfeed.config import FeedSettings  # noqa: E402  (import after path setup)
from journalfeed.services.aggregator import ArticleFeed  # noqa: E402


def main() -> None:
    """Refresh every source once and print the resulting feed state as JSON."""

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        settings = FeedSettings.from_env()
    except ValueError as exc:
        logging.error("Could not load settings: %s", exc)
        sys.exit(1)

    feed = ArticleFeed(settings=settings)
    for source in feed.sources:
        logging.info("Refreshing %s (%s)", source.display_name, source.url)

    feed.refresh()

    for failure in feed.state.failures:
        logging.warning("%s contributed no articles (%s): %s", failure.source, failure.kind.value, failure.message)

    print(feed.state.model_dump_json(indent=2))

    if feed.error_message:
        sys.exit(1)


if __name__ == "__main__":
    main()
