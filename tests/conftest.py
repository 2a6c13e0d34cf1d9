import sys
from pathlib import Path

import pytest

# Ensure the project's `src/` directory is on sys.path so test modules
# can import `scoring_common` and `scoring_engine` without installing the
# package first.
root_dir = Path(__file__).resolve().parents[1]
src_dir = root_dir / "src"
if src_dir.exists() and str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

import scoring_common.weights as W  # noqa: E402


def _default_weights():
    return {
        "enjoyment": 0.35,
        "writing": 0.25,
        "themes": 0.2,
        "characters": 0.12,
        "worldbuilding": 0.08,
    }


@pytest.fixture(autouse=True)
def fixed_default_weights(monkeypatch):
    """Pin the system defaults so a local WEIGHTS_PATH never leaks into tests."""
    monkeypatch.setattr(W, "get", _default_weights)
    return _default_weights()
