"""Source registry and runtime settings for the journal feed."""

from __future__ import annotations

import os
from typing import Iterator, List, Mapping, Tuple

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError

__all__ = [
    "DEFAULT_USER_AGENT",
    "ENV_VARIABLES",
    "FeedSettings",
    "SOURCES",
    "Source",
    "TITLE_BLOCK_PATTERN",
    "get_source",
    "iter_sources",
]

#: Mobile Safari signature; the listing pages serve different markup per client.
DEFAULT_USER_AGENT = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"

#: Title block used by Oxford Academic issue and listing pages. Group 1 is the
#: anchor ``href`` and group 2 the anchor's inner markup.
TITLE_BLOCK_PATTERN = (
    r'<h5[^>]*class="[^"]*al-article-item-title[^"]*"[^>]*>\s*'
    r'<a[^>]*href="([^"]+)"[^>]*>(.*?)</a>'
)


class Source(BaseModel):
    """A fixed journal listing page that articles are pulled from."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., description="Stable short key for the source")
    display_name: str = Field(..., description="Human friendly journal name")
    url: HttpUrl = Field(
        ...,
        description="Listing page address, also the base for resolving relative links",
    )
    title_pattern: str = Field(
        default=TITLE_BLOCK_PATTERN,
        description="Regular expression locating article title blocks on the listing page",
    )


SOURCES: Tuple[Source, ...] = (
    Source(
        identifier="ofid",
        display_name="Open Forum Infectious Diseases",
        url="https://academic.oup.com/ofid",
    ),
    Source(
        identifier="cid",
        display_name="Clinical Infectious Diseases",
        url="https://academic.oup.com/cid",
    ),
)


def iter_sources() -> Iterator[Source]:
    """Iterate over the registered sources in declaration order."""

    return iter(SOURCES)


def get_source(identifier: str) -> Source:
    """Return the registered source named ``identifier``.

    Raises:
        KeyError: If no source uses that identifier.
    """

    for source in SOURCES:
        if source.identifier == identifier:
            return source

    available = [source.identifier for source in SOURCES]
    raise KeyError(f"Source '{identifier}' not found. Available: {available}")


ENV_VARIABLES = {
    "user_agent": "JOURNALFEED_USER_AGENT",
    "connect_timeout": "JOURNALFEED_CONNECT_TIMEOUT",
    "read_timeout": "JOURNALFEED_READ_TIMEOUT",
    "strict_status": "JOURNALFEED_STRICT_STATUS",
    "concurrent_fetch": "JOURNALFEED_CONCURRENT_FETCH",
    "max_workers": "JOURNALFEED_MAX_WORKERS",
}


class FeedSettings(BaseModel):
    """Runtime knobs for fetching and aggregating listing pages."""

    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    connect_timeout: float = Field(default=10.0, gt=0)
    read_timeout: float = Field(default=60.0, gt=0)
    strict_status: bool = Field(
        default=True,
        description=(
            "Treat non-2xx responses as fetch failures. When disabled the body of an "
            "error response is decoded and scanned like any other page."
        ),
    )
    concurrent_fetch: bool = Field(
        default=False,
        description="Fetch sources on a thread pool instead of one after another",
    )
    max_workers: int = Field(default=4, ge=1)

    @property
    def timeout(self) -> Tuple[float, float]:
        """Return the ``(connect, read)`` timeout pair passed to :mod:`requests`."""

        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FeedSettings":
        """Build settings from ``JOURNALFEED_*`` environment variables.

        Unset or blank variables fall back to the defaults.
        """

        env = os.environ if environ is None else environ
        values = {}
        for field_name, variable in ENV_VARIABLES.items():
            raw = env.get(variable)
            if raw is None or not raw.strip():
                continue
            values[field_name] = raw.strip()

        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            invalid: List[str] = [
                ENV_VARIABLES.get(str(error["loc"][0]), str(error["loc"][0]))
                for error in exc.errors()
                if error["loc"]
            ]
            raise ValueError(
                f"Invalid environment configuration: {', '.join(invalid)}\n{exc}"
            ) from exc
