"""Scoring rules used by the match analytics."""

from . import padel

__all__ = [
    "padel",
]
