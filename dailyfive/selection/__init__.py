"""Selection of the daily questions."""

from .selector import Pick, Selection, SelectionConfig, select_questions

__all__ = [
    "Pick",
    "Selection",
    "SelectionConfig",
    "select_questions",
]
