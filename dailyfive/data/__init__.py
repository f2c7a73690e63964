"""Data handling modules for the Daily Five generator."""

from .loader import load_fallback_dataset, load_pools_dir
from .schemas import DIFFICULTIES, DailyArtifact, OutputQuestion, RawQuestion

__all__ = [
    "DIFFICULTIES",
    "DailyArtifact",
    "OutputQuestion",
    "RawQuestion",
    "load_fallback_dataset",
    "load_pools_dir",
]
