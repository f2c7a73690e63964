"""Question sources for the Daily Five generator."""

from .base import SourceFailed, SourceOk, SourceResult, SourceStrategy, resolve_pools
from .local import LocalPoolSource, StaticSource
from .opentdb import OpenTDBSource

__all__ = [
    "SourceOk",
    "SourceFailed",
    "SourceResult",
    "SourceStrategy",
    "resolve_pools",
    "OpenTDBSource",
    "LocalPoolSource",
    "StaticSource",
]
