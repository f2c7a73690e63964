"""Daily Five.

Builds a daily five-question trivia quiz from OpenTDB with local fallbacks,
readability filtering, ledger-based deduplication and deterministic option
shuffling.
"""

from .config import AppConfig, default_app_config, load_config
from .daycount import DayInfo, resolve_day
from .ledger import Ledger
from .pipeline import generate_daily
from .selection import select_questions
from .utils import seeded_shuffle, setup_logging

__all__ = [
    "__version__",
    "AppConfig",
    "DayInfo",
    "Ledger",
    "default_app_config",
    "generate_daily",
    "load_config",
    "resolve_day",
    "seeded_shuffle",
    "select_questions",
    "setup_logging",
]

__version__ = "0.1.0"
