"""Prometheus metrics shared by the scoring engine.

Counters and histograms are registered once per process on import. Callers
never need to check whether metrics are enabled: when ``ENABLE_METRICS`` is
off the helpers below simply skip the update.
"""
from __future__ import annotations

from contextlib import contextmanager

from prometheus_client import Counter, Histogram

from .settings import settings as S

# ---------------------------------------------------------------------------
# Metric definitions (add new ones here)
# ---------------------------------------------------------------------------

SCORING_RUNS_TOTAL = Counter(
    "scoring_engine_runs_total",
    "Number of scoring engine operations executed",
    ["operation"],
)

SCORING_DURATION_SECONDS = Histogram(
    "scoring_engine_duration_seconds",
    "Duration of scoring engine operations in seconds",
    ["operation"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1),
)

FALLBACKS_TOTAL = Counter(
    "scoring_engine_fallbacks_total",
    "Malformed numeric inputs replaced by a default value",
    ["field"],
)


@contextmanager
def track(operation: str):
    """Count *operation* and time the wrapped block."""
    if not S.enable_metrics:
        yield
        return
    SCORING_RUNS_TOTAL.labels(operation=operation).inc()
    with SCORING_DURATION_SECONDS.labels(operation=operation).time():
        yield


def record_fallback(field: str) -> None:
    if S.enable_metrics:
        FALLBACKS_TOTAL.labels(field=field).inc()


__all__ = [
    "SCORING_RUNS_TOTAL",
    "SCORING_DURATION_SECONDS",
    "FALLBACKS_TOTAL",
    "track",
    "record_fallback",
]
