"""
Errors raised by the scoring engine.

Only caller contract violations are raised. Data-quality problems such as a
missing importance or a non-finite weight are replaced by defaults instead.
"""

from typing import Any, Dict, Optional


class ScoringEngineError(Exception):
    """Base exception for scoring engine errors."""

    def __init__(
        self,
        message: str,
        error_code: str = "SCORING_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class InvalidRankError(ScoringEngineError, ValueError):
    """A rank below 1 reached the engine; tag ordering upstream is broken."""

    def __init__(self, rank: Any):
        super().__init__(
            message=f"Rank must be an integer >= 1, got {rank!r}",
            error_code="INVALID_RANK",
            details={"rank": rank},
        )


class TagSelectionError(ScoringEngineError, ValueError):
    """A submitted tag list breaks the per-kind or total cardinality limits."""

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        count: Optional[int] = None,
        limit: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            error_code="INVALID_TAG_SELECTION",
            details={"kind": kind, "count": count, "limit": limit},
        )
        self.kind = kind
        self.count = count
        self.limit = limit
