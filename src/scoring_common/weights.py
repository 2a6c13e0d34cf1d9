"""System default preference weights.

The defaults live in code and may be overridden by a JSON file (path comes
from Settings). The file is re-read lazily whenever its mtime changes, so
operators can retune the defaults without a restart.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict

from .models import PreferenceWeights
from .settings import settings as S
from .structured_logging import get_logger

logger = get_logger(__name__)

_DEFAULT_WEIGHTS: Dict[str, float] = {
    "enjoyment": 0.35,
    "writing": 0.25,
    "themes": 0.2,
    "characters": 0.12,
    "worldbuilding": 0.08,
}

_mtime = 0.0
_weights = _DEFAULT_WEIGHTS.copy()


def _parse_overrides(raw: object) -> Dict[str, float]:
    if not isinstance(raw, dict):
        raise TypeError(f"weights file must hold a JSON object, got {type(raw).__name__}")
    overrides: Dict[str, float] = {}
    for key, value in raw.items():
        if key not in _DEFAULT_WEIGHTS:
            continue
        weight = float(value)
        # weights live in [0, 1]; NaN fails both comparisons
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"weight {key!r} must be within [0, 1], got {value!r}")
        overrides[key] = weight
    return overrides


def _load_once() -> None:
    global _weights, _mtime
    if not S.weights_path:
        _weights = _DEFAULT_WEIGHTS.copy()
        return
    path = Path(S.weights_path)
    try:
        if not path.exists():
            _weights = _DEFAULT_WEIGHTS.copy()
            _mtime = 0.0
            return
        m = path.stat().st_mtime
        if m == _mtime:
            return
        # a broken file is only reported once per modification
        _mtime = m
        overrides = _parse_overrides(json.loads(path.read_text()))
        _weights = {**_DEFAULT_WEIGHTS, **overrides}
        logger.info("Loaded default preference weights", extra={"path": str(path), "weights": _weights})
    except (OSError, ValueError, TypeError) as exc:
        # keep previous weights on error
        logger.warning(
            "Could not load weights file, keeping previous defaults",
            extra={"path": str(path), "error": str(exc)},
        )


def get() -> Dict[str, float]:
    """Return the current default weight mapping (a copy)."""

    _load_once()
    return _weights.copy()


def default_preference_weights(user_id: int | None = None) -> PreferenceWeights:
    """Materialise the system defaults as a ``PreferenceWeights`` record."""

    return PreferenceWeights(user_id=user_id, **get())
