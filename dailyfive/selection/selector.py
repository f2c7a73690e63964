"""
Question selection for the daily quiz.

Precedence when constraints conflict, strongest first:
1. Difficulty quota (2 easy, 2 medium, 1 hard)
2. Category cap (at most two questions per category)
3. General-knowledge minimum (at least two, when available)

Shortfalls are backfilled in tiers: remaining fresh questions of any
difficulty, then already-served questions, then the fallback dataset. Only
the first tier keeps the freshness guarantee. Selection never consults a
random source; ties go to pool order.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from ..data.schemas import DIFFICULTIES, RawQuestion
from ..errors import InsufficientQuestionsError
from ..qa.normalize import key_for

logger = logging.getLogger(__name__)

TIER_FRESH = "fresh"
TIER_BACKFILL = "backfill"
TIER_STALE = "stale"
TIER_FALLBACK = "fallback"

WAIVED_TIERS = frozenset({TIER_STALE, TIER_FALLBACK})


@dataclass
class SelectionConfig:
    quota: dict[str, int] = field(default_factory=lambda: {"easy": 2, "medium": 2, "hard": 1})
    total: int = 5
    general_knowledge_min: int = 2
    general_knowledge_category: str = "General Knowledge"
    category_cap: int = 2


@dataclass(frozen=True)
class Pick:
    question: RawQuestion
    tier: str


@dataclass
class Selection:
    picks: list[Pick]

    @property
    def questions(self) -> list[RawQuestion]:
        return [p.question for p in self.picks]

    @property
    def freshness_waived(self) -> bool:
        return any(p.tier in WAIVED_TIERS for p in self.picks)

    def tier_counts(self) -> dict[str, int]:
        return dict(Counter(p.tier for p in self.picks))


class _Picker:
    """Mutable bookkeeping for one selection run."""

    def __init__(self, config: SelectionConfig):
        self.config = config
        self.picks: list[Pick] = []
        self.keys: set[str] = set()
        self.categories: Counter[str] = Counter()
        self.per_difficulty: Counter[str] = Counter()

    @property
    def full(self) -> bool:
        return len(self.picks) >= self.config.total

    def quota_left(self, difficulty: str) -> int:
        return self.config.quota.get(difficulty, 0) - self.per_difficulty[difficulty]

    def is_general(self, q: RawQuestion) -> bool:
        return q.category == self.config.general_knowledge_category

    @property
    def general_count(self) -> int:
        return self.categories[self.config.general_knowledge_category]

    def cap_allows(self, q: RawQuestion) -> bool:
        if not q.category:
            return True
        return self.categories[q.category] < self.config.category_cap

    def can_take(self, q: RawQuestion, capped: bool) -> bool:
        if self.full or key_for(q) in self.keys:
            return False
        return self.cap_allows(q) if capped else True

    def take(self, q: RawQuestion, tier: str) -> None:
        self.picks.append(Pick(q, tier))
        self.keys.add(key_for(q))
        self.per_difficulty[q.difficulty] += 1
        if q.category:
            self.categories[q.category] += 1

    def fill_from(self, pool: Iterable[RawQuestion], tier: str, capped: bool) -> None:
        for q in pool:
            if self.full:
                return
            if self.can_take(q, capped):
                self.take(q, tier)


def _by_difficulty(pools: Mapping[str, Sequence[RawQuestion]] | None) -> dict[str, list[RawQuestion]]:
    """Re-key pools and stamp each question with its bucket's difficulty."""
    out: dict[str, list[RawQuestion]] = {d: [] for d in DIFFICULTIES}
    for d, qs in (pools or {}).items():
        out.setdefault(d, []).extend(q if q.difficulty == d else q._replace(difficulty=d) for q in qs)
    return out


def _flatten(pools: Mapping[str, Sequence[RawQuestion]]) -> list[RawQuestion]:
    return [q for d in pools for q in pools[d]]


def select_questions(
    fresh: Mapping[str, Sequence[RawQuestion]],
    stale: Mapping[str, Sequence[RawQuestion]] | None = None,
    fallback: Mapping[str, Sequence[RawQuestion]] | None = None,
    config: SelectionConfig | None = None,
) -> Selection:
    """Pick ``config.total`` questions from difficulty-keyed pools.

    Args:
        fresh: Filtered questions not present in the ledger
        stale: Filtered questions already in the ledger
        fallback: Last-resort dataset
        config: Quotas and soft constraints

    Returns:
        Selection ordered easy, medium, hard

    Raises:
        InsufficientQuestionsError: If every tier together is too small
    """
    config = config or SelectionConfig()
    fresh_pools = _by_difficulty(fresh)
    order = [d for d in config.quota if d in fresh_pools] + [
        d for d in fresh_pools if d not in config.quota
    ]
    picker = _Picker(config)

    # General-knowledge pass within quota and cap.
    for d in order:
        for q in fresh_pools[d]:
            if picker.general_count >= config.general_knowledge_min:
                break
            if picker.quota_left(d) <= 0:
                break
            if picker.is_general(q) and picker.can_take(q, capped=True):
                picker.take(q, TIER_FRESH)

    # Quota pass, capped then relaxed.
    for capped in (True, False):
        for d in order:
            for q in fresh_pools[d]:
                if picker.quota_left(d) <= 0:
                    break
                if picker.can_take(q, capped):
                    picker.take(q, TIER_FRESH)

    # Backfill tiers.
    for capped in (True, False):
        picker.fill_from(_flatten({d: fresh_pools[d] for d in order}), TIER_BACKFILL, capped)
    for capped in (True, False):
        picker.fill_from(_flatten(_by_difficulty(stale)), TIER_STALE, capped)
    for capped in (True, False):
        picker.fill_from(_flatten(_by_difficulty(fallback)), TIER_FALLBACK, capped)

    if not picker.full:
        raise InsufficientQuestionsError(
            f"Only {len(picker.picks)} of {config.total} questions available after all fallbacks",
            found=len(picker.picks),
            required=config.total,
        )

    rank = {d: i for i, d in enumerate(order)}
    picks = sorted(
        enumerate(picker.picks),
        key=lambda item: (rank.get(item[1].question.difficulty, len(rank)), item[0]),
    )
    selection = Selection([p for _, p in picks])
    logger.debug("Selected tiers: %s", selection.tier_counts())
    return selection
