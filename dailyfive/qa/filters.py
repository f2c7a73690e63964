from __future__ import annotations

"""
Readability filter for candidate trivia questions.

Each check is a cheap heuristic; a question must pass all of them:
- Structure: one correct and three distinct incorrect answers
- Length bounds on the stem and on every option
- Banned "trick" phrasings (which-of-the-following, NOT/EXCEPT, years, formulas)
- Category allowlist (unlabelled questions pass)
- Shouting: too many capitals relative to lowercase letters
"""

import logging
import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from re import Pattern

from ..data.schemas import RawQuestion

logger = logging.getLogger(__name__)

DEFAULT_BAN_PATTERNS: tuple[str, ...] = (
    r"(?i)\b(in|which|what)\s+year\b",
    r"(?i)\bwhich of (the|these)\b",
    r"(?i)\bfollowing\b",
    r"\bNOT\b",
    r"\bEXCEPT\b",
    r"(?i)\broman\s+numeral\b",
    r"(?i)\bchemical\b",
    r"(?i)\bformula\b",
    r"(?i)\bequation\b",
    r"(?i)\bprime\s+number\b",
    r"(?i)\b(nth|[0-9]{1,4}(st|nd|rd|th))\b.*\bcentury\b",
)

DEFAULT_ALLOW_CATEGORIES: tuple[str, ...] = (
    "General Knowledge",
    "Entertainment: Film",
    "Entertainment: Music",
    "Entertainment: Television",
    "Entertainment: Books",
    "Entertainment: Video Games",
    "Science & Nature",
    "Geography",
    "Sports",
    "Celebrities",
)

UPPER_RE = re.compile(r"[A-Z]")
LOWER_RE = re.compile(r"[a-z]")


@dataclass
class FilterConfig:
    max_question_len: int = 110
    max_option_len: int = 36
    ban_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_BAN_PATTERNS))
    allow_categories: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOW_CATEGORIES))
    incorrect_answers: int = 3


class ContentFilter:
    """Conjunctive predicate over cleaned ``RawQuestion`` objects."""

    def __init__(self, config: FilterConfig | None = None):
        self.config = config or FilterConfig()
        self._patterns: list[Pattern[str]] = [re.compile(p) for p in self.config.ban_patterns]
        self._allowed = frozenset(self.config.allow_categories)

    def has_banned_phrase(self, text: str) -> bool:
        return any(rx.search(text) for rx in self._patterns)

    def is_relatable_category(self, category: str | None) -> bool:
        if not category:
            return True
        return category in self._allowed

    @staticmethod
    def is_shouting(text: str) -> bool:
        return len(UPPER_RE.findall(text)) > 2 * len(LOWER_RE.findall(text))

    def is_well_formed(self, q: RawQuestion) -> bool:
        """One correct and the configured number of distinct, non-empty incorrect answers."""
        if not q.question.strip() or not q.correct_answer.strip():
            return False
        wrong = [a.strip() for a in q.incorrect_answers]
        if len(wrong) != self.config.incorrect_answers or not all(wrong):
            return False
        options = [q.correct_answer.strip(), *wrong]
        return len(set(options)) == len(options)

    def check(self, q: RawQuestion) -> list[str]:
        """Return the reasons ``q`` is rejected; empty means accepted."""
        reasons: list[str] = []
        if not self.is_well_formed(q):
            reasons.append("structure")
        if len(q.question.strip()) > self.config.max_question_len:
            reasons.append("question_length")
        if any(len(opt.strip()) > self.config.max_option_len for opt in q.options):
            reasons.append("option_length")
        if self.has_banned_phrase(q.question):
            reasons.append("banned_phrase")
        if not self.is_relatable_category(q.category):
            reasons.append("category")
        if self.is_shouting(q.question):
            reasons.append("shouting")
        return reasons

    def accepts(self, q: RawQuestion) -> bool:
        return not self.check(q)

    def apply(self, pool: Iterable[RawQuestion]) -> list[RawQuestion]:
        """Keep accepted questions in pool order."""
        kept: list[RawQuestion] = []
        rejected: Counter[str] = Counter()
        for q in pool:
            reasons = self.check(q)
            if reasons:
                rejected.update(reasons)
            else:
                kept.append(q)
        if rejected:
            logger.debug("Filter kept %d; rejections by reason: %s", len(kept), dict(rejected))
        return kept
