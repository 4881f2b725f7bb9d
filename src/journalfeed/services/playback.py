"""Spoken summaries and topic briefs on top of the article feed.

The speech engine itself is an external collaborator; anything implementing
:class:`SpeechSynthesizer` can be plugged in.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol, Sequence

from journalfeed.models import Article
from journalfeed.services.aggregator import ArticleFeed

__all__ = [
    "BRIEF_ARTICLE_LIMIT",
    "PlaybackController",
    "SUGGESTED_TOPICS",
    "SpeechSynthesizer",
    "compose_topic_brief",
]

logger = logging.getLogger(__name__)

#: Quick topics offered by the in-car and touch surfaces.
SUGGESTED_TOPICS = (
    "COVID",
    "Influenza",
    "Antibiotics",
    "Vaccination",
    "HIV",
    "Hepatitis",
    "Sepsis",
    "Pneumonia",
    "Fungal",
    "Bacterial",
    "Viral",
    "Resistance",
)

#: Articles read out in full in a topic brief.
BRIEF_ARTICLE_LIMIT = 3


class SpeechSynthesizer(Protocol):
    """Text-to-speech engine driven by :class:`PlaybackController`.

    Engines report playback start/finish by calling ``on_playback_state_changed``.
    """

    on_playback_state_changed: Optional[Callable[[bool], None]]

    def speak(self, text: str) -> None: ...

    def stop(self) -> None: ...

    def pause(self) -> None: ...

    def resume(self) -> None: ...


def compose_topic_brief(topic: str, articles: Sequence[Article]) -> str:
    """Return the text read out for a topic brief over ``articles``."""

    if not articles:
        return (
            f"No articles found matching '{topic}'. "
            "Try a different topic or check recent articles."
        )

    count = len(articles)
    parts = [
        f"Here's your brief on {topic}.",
        f"I found {count} related article{'' if count == 1 else 's'}.",
    ]
    for index, article in enumerate(articles[:BRIEF_ARTICLE_LIMIT], start=1):
        parts.append(f"Article {index}: {article.title}. {article.summary}")

    if count > BRIEF_ARTICLE_LIMIT:
        parts.append(
            f"There are {count - BRIEF_ARTICLE_LIMIT} more articles available on this topic."
        )

    return " ".join(parts)


class PlaybackController:
    """Track what is being read out and forward transport controls to the engine."""

    def __init__(self, feed: ArticleFeed, synthesizer: SpeechSynthesizer) -> None:
        self._feed = feed
        self._synthesizer = synthesizer
        self.is_playing = False
        self.currently_playing_title: str | None = None
        synthesizer.on_playback_state_changed = self._on_playback_state_changed

    def _on_playback_state_changed(self, playing: bool) -> None:
        self.is_playing = playing
        if not playing:
            self.currently_playing_title = None

    def speak_summary(self, article: Article) -> None:
        self.currently_playing_title = article.title
        self._synthesizer.speak(article.summary)

    def speak_topic_brief(self, topic: str) -> str:
        """Read out a brief for ``topic`` built from the current articles and return its text."""

        matches = self._feed.search_articles(topic)
        brief = compose_topic_brief(topic, matches)
        logger.info("Speaking brief on %r covering %d articles", topic, len(matches))

        self.currently_playing_title = f"Topic: {topic}"
        self._synthesizer.speak(brief)
        return brief

    def stop(self) -> None:
        self._synthesizer.stop()
        self.currently_playing_title = None

    def pause(self) -> None:
        self._synthesizer.pause()

    def resume(self) -> None:
        self._synthesizer.resume()
