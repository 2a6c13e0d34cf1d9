"""
Shared utilities for the taxonomy scoring engine.
Import surface: `from scoring_common import settings, models`.
"""

from .settings import settings
from . import models

__all__ = [
    "settings",
    "models",
]
