"""Rank-decayed importance weight shared by every scorer."""

from __future__ import annotations

import math
import numbers

from .errors import InvalidRankError


def rank_weight(rank: int) -> float:
    """Return ``1 / (1 + ln(rank))`` for a 1-based rank.

    Rank 1 weighs 1.0; the weight shrinks with every position but never
    reaches zero, so low-ranked tags still count a little.
    """
    if isinstance(rank, bool) or not isinstance(rank, numbers.Integral) or rank < 1:
        raise InvalidRankError(rank)
    return 1.0 / (1.0 + math.log(rank))
