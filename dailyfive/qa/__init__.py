"""Cleaning and readability filtering of candidate questions."""

from .filters import ContentFilter, FilterConfig
from .normalize import clean_question, clean_text, key_for, question_key

__all__ = [
    "ContentFilter",
    "FilterConfig",
    "clean_question",
    "clean_text",
    "key_for",
    "question_key",
]
