"""Pattern-based extraction of article entries from listing page markup.

Listing pages have no machine readable feed, so entries are located with a
regular expression over the raw markup rather than a document parser. Markup
that does not match simply produces fewer entries.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from itertools import islice
from typing import List, NamedTuple, Tuple
from urllib.parse import urljoin

from pydantic import HttpUrl, TypeAdapter

from journalfeed.config import Source
from journalfeed.exceptions import PatternCompileError
from journalfeed.models import Article
from journalfeed.services.summary import resolve_summary, strip_markup

__all__ = [
    "MAX_ENTRIES_PER_SOURCE",
    "RawEntry",
    "build_articles",
    "compile_pattern",
    "extract_entries",
    "resolve_link",
]

logger = logging.getLogger(__name__)

#: Upper bound on title matches considered per page, in document order.
MAX_ENTRIES_PER_SOURCE = 10

_HTTP_URL = TypeAdapter(HttpUrl)


class RawEntry(NamedTuple):
    """A title block found on a listing page, before summary resolution."""

    url: str
    title: str
    span: Tuple[int, int]


@lru_cache(maxsize=32)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a title block pattern capturing ``(href, inner markup)``.

    Raises:
        PatternCompileError: If the pattern is invalid or has fewer than two groups.
    """

    try:
        compiled = re.compile(pattern, re.IGNORECASE | re.DOTALL)
    except re.error as exc:
        raise PatternCompileError(pattern, str(exc)) from exc

    if compiled.groups < 2:
        raise PatternCompileError(pattern, "expected capture groups for the link and title")
    return compiled


def resolve_link(base_url: str, href: str) -> str | None:
    """Resolve ``href`` against ``base_url``; ``None`` unless the result is an http(s) URL."""

    try:
        candidate = urljoin(base_url, href.strip())
        return str(_HTTP_URL.validate_python(candidate))
    except ValueError:
        return None


def extract_entries(text: str, source: Source) -> List[RawEntry]:
    """Return up to :data:`MAX_ENTRIES_PER_SOURCE` entries found in ``text``.

    Matches with an empty title or a link that does not resolve are dropped; they
    still count towards the cap.
    """

    try:
        pattern = compile_pattern(source.title_pattern)
    except PatternCompileError as exc:
        logger.error("Skipping extraction for %s: %s", source.identifier, exc)
        return []

    base_url = str(source.url)
    entries: List[RawEntry] = []
    for match in islice(pattern.finditer(text), MAX_ENTRIES_PER_SOURCE):
        href, inner = match.group(1), match.group(2)
        if href is None or inner is None:
            continue

        title = strip_markup(inner)
        if not title:
            logger.debug("Dropping entry at %d in %s: empty title", match.start(), source.identifier)
            continue

        url = resolve_link(base_url, href)
        if url is None:
            logger.debug("Dropping entry %r in %s: unresolvable link %r", title, source.identifier, href)
            continue

        entries.append(RawEntry(url=url, title=title, span=match.span()))

    return entries


def build_articles(text: str, source: Source) -> List[Article]:
    """Extract entries from ``text`` and attach a nearby summary to each."""

    return [
        Article(
            title=entry.title,
            summary=resolve_summary(text, entry.span, entry.title),
            url=entry.url,
            source=source,
        )
        for entry in extract_entries(text, source)
    ]
