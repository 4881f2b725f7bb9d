"""Exception hierarchy for the journal feed pipeline."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from journalfeed.models import SourceFailure

__all__ = [
    "AggregateError",
    "FailureKind",
    "FetchError",
    "JournalFeedError",
    "PatternCompileError",
]


class FailureKind(str, Enum):
    """Classification recorded for a source that contributed no articles."""

    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    CANCELLED = "cancelled"


class JournalFeedError(Exception):
    """Base exception for all journal feed errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "context": self.context,
        }


class FetchError(JournalFeedError):
    """A listing page could not be retrieved or decoded."""

    def __init__(
        self,
        message: str,
        *,
        kind: FailureKind,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        context: Dict[str, Any] = {"kind": kind.value}
        if source is not None:
            context["source"] = source
        if status_code is not None:
            context["status_code"] = status_code
        super().__init__(message, error_code=f"fetch_{kind.value}", context=context)
        self.kind = kind
        self.source = source
        self.status_code = status_code


class PatternCompileError(JournalFeedError):
    """An extraction pattern is not a usable regular expression."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            f"Invalid extraction pattern: {reason}",
            context={"pattern": pattern},
        )
        self.pattern = pattern


class AggregateError(JournalFeedError):
    """Every configured source failed during a refresh."""

    def __init__(self, failures: Sequence["SourceFailure"]):
        self.failures: List["SourceFailure"] = list(failures)
        details = "; ".join(
            f"{failure.source} ({failure.kind.value}): {failure.message}" for failure in self.failures
        )
        super().__init__(
            f"All {len(self.failures)} sources failed: {details}",
            context={"sources": [failure.source for failure in self.failures]},
        )
