"""Best-effort summaries drawn from the markup around a title match."""

from __future__ import annotations

import re
from typing import Tuple

__all__ = [
    "SUMMARY_SEARCH_RADIUS",
    "nearby_paragraph",
    "placeholder_summary",
    "resolve_summary",
    "strip_markup",
]

#: Characters searched on each side of a title match for a summary paragraph.
SUMMARY_SEARCH_RADIUS = 1500

_TAG_RE = re.compile(r"<[^>]+>")
_PARAGRAPH_RE = re.compile(r"<p[^>]*>(.*?)</p>", re.IGNORECASE | re.DOTALL)


def strip_markup(fragment: str) -> str:
    """Remove tags and ``&nbsp;`` entities from ``fragment`` and trim it."""

    text = _TAG_RE.sub("", fragment)
    return text.replace("&nbsp;", " ").strip()


def placeholder_summary(title: str) -> str:
    """Return the fallback summary shown when no paragraph could be found."""

    return f"Summary not available yet. Open the article for full details on {title}."


def nearby_paragraph(text: str, span: Tuple[int, int]) -> str | None:
    """Return the first non-empty paragraph within reach of ``span``.

    The window extends :data:`SUMMARY_SEARCH_RADIUS` characters before the start
    and after the end of the match, clamped to the document.
    """

    start = max(0, span[0] - SUMMARY_SEARCH_RADIUS)
    end = min(len(text), span[1] + SUMMARY_SEARCH_RADIUS)

    match = _PARAGRAPH_RE.search(text, start, end)
    if match is None:
        return None

    paragraph = strip_markup(match.group(1))
    return paragraph or None


def resolve_summary(text: str, span: Tuple[int, int], title: str) -> str:
    """Return a summary for the entry at ``span``; never empty."""

    return nearby_paragraph(text, span) or placeholder_summary(title)
