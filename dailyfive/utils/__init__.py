"""Utilities for the Daily Five generator."""

from .determinism import seeded_shuffle
from .logging import setup_logging

__all__ = [
    "setup_logging",
    "seeded_shuffle",
]
