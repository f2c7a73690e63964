"""
End-to-end generation of the daily artifact.

day/ledger -> sources -> clean + filter -> fresh/stale split -> select ->
option shuffle -> write artifact and ledger together.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .config import AppConfig
from .daycount import DayInfo, resolve_day
from .data.loader import load_fallback_dataset, pool_size
from .data.schemas import DIFFICULTIES, DailyArtifact, OutputQuestion, Pools, RawQuestion
from .errors import InvalidArtifactError
from .ledger import Ledger
from .qa.filters import ContentFilter
from .qa.normalize import clean_question, key_for, question_key
from .selection.selector import Selection, select_questions
from .sources.base import SourceStrategy, resolve_pools
from .sources.local import LocalPoolSource, StaticSource
from .sources.opentdb import OpenTDBSource
from .utils.determinism import option_seed, pool_seed, seeded_shuffle
from .utils.resilience import RetryConfig, RetryPolicy
from .utils.validation import SchemaValidationError, validate_artifact
from .writer import read_artifact, write_outputs

logger = logging.getLogger(__name__)

POOL_SALTS = {"easy": 0x1111, "medium": 0x2222, "hard": 0x3333}

STATUS_WRITTEN = "written"
STATUS_UNCHANGED = "unchanged"


@dataclass
class RunResult:
    status: str
    day: DayInfo
    artifact: Optional[DailyArtifact] = None
    selection: Optional[Selection] = None


def build_strategies(cfg: AppConfig, fallback: Pools) -> list[SourceStrategy]:
    """Source chain: OpenTDB (unless skipped), local pools, static dataset."""
    src = cfg.source
    strategies: list[SourceStrategy] = []
    if not src.skip_api:
        policy = RetryPolicy(
            RetryConfig(
                max_attempts=src.max_retries,
                initial_delay=src.backoff_base,
                max_delay=src.max_backoff,
                jitter=src.jitter,
            )
        )
        strategies.append(
            OpenTDBSource(
                api_url=src.api_url,
                chunk_sizes=src.chunk_sizes,
                timeout=src.timeout,
                politeness_delay=src.politeness_delay,
                retry_policy=policy,
            )
        )
    strategies.append(LocalPoolSource(src.pools_dir))
    strategies.append(StaticSource(fallback))
    return strategies


def partition_pools(
    pools: Pools, content_filter: ContentFilter, ledger: Ledger
) -> tuple[Pools, Pools]:
    """Filter pools and split them into fresh and already-served questions.

    Duplicates within the run are dropped, keeping the first occurrence.
    """
    fresh: Pools = {d: [] for d in DIFFICULTIES}
    stale: Pools = {d: [] for d in DIFFICULTIES}
    local_seen: set[str] = set()
    for d in DIFFICULTIES:
        for q in content_filter.apply(pools.get(d, [])):
            key = key_for(q)
            if key in local_seen:
                continue
            local_seen.add(key)
            (stale if key in ledger else fresh)[d].append(q)
    return fresh, stale


def reorder_for_reroll(pools: Pools, day: str, nonce: str) -> Pools:
    if not nonce:
        return pools
    return {
        d: seeded_shuffle(qs, pool_seed(day, nonce, POOL_SALTS.get(d, 0)))
        for d, qs in pools.items()
    }


def prepare_fallback(dataset: Pools, content_filter: ContentFilter) -> Pools:
    """Clean the last-resort dataset once and drop records that cannot form four options.

    The result feeds both ``StaticSource`` and the selector's fallback tier,
    so both see the same text and the same keys.
    """
    out: Pools = {}
    dropped = 0
    for d, qs in dataset.items():
        cleaned = [clean_question(q) for q in qs]
        out[d] = [q for q in cleaned if content_filter.is_well_formed(q)]
        dropped += len(cleaned) - len(out[d])
    if dropped:
        logger.warning("Dropped %d malformed fallback question(s)", dropped)
    return out


def build_output(questions: Sequence[RawQuestion], day: str, nonce: str = "") -> list[OutputQuestion]:
    """Shuffle each question's options with its per-day seed."""
    out: list[OutputQuestion] = []
    for idx, q in enumerate(questions):
        options = seeded_shuffle(q.options, option_seed(day, idx, nonce))
        correct = options.index(q.correct_answer)
        out.append(
            OutputQuestion(
                text=q.question,
                options=options,
                correct=correct,
                difficulty=q.difficulty,
                category=q.category,
            )
        )
    return out


def output_key(q: OutputQuestion) -> str:
    return question_key(q.text, q.options[q.correct])


def generate_daily(
    cfg: AppConfig,
    now: Optional[datetime] = None,
    nonce: str = "",
    force: bool = False,
    strategies: Optional[Sequence[SourceStrategy]] = None,
    fallback: Optional[Pools] = None,
) -> RunResult:
    """Produce and persist today's artifact.

    Args:
        cfg: Application configuration
        now: Instant to resolve the day from (defaults to now)
        nonce: Reroll nonce; perturbs pool order and option shuffles
        force: Regenerate even if today's artifact already exists
        strategies: Source chain override
        fallback: Last-resort dataset override

    Returns:
        RunResult with status ``written`` or ``unchanged``

    Raises:
        InsufficientQuestionsError: If five questions cannot be assembled
        InvalidArtifactError: If the assembled artifact fails schema validation
        ArtifactWriteError: If the outputs could not be persisted
    """
    started = time.time()
    info = resolve_day(now, cfg.schedule.timezone, cfg.schedule.epoch)
    ledger = Ledger.load(cfg.paths.ledger, max_size=cfg.paths.max_ledger)
    logger.info(
        "Generating day %s (index %d); ledger holds %d keys",
        info.day, info.index, len(ledger),
        extra={"day": info.day, "day_index": info.index},
    )

    previous = read_artifact(cfg.paths.artifact)
    if previous and previous.get("day") == info.day and not nonce and not force:
        logger.info("Artifact for %s already exists; nothing to do", info.day)
        return RunResult(status=STATUS_UNCHANGED, day=info)

    if fallback is None:
        fallback = load_fallback_dataset(cfg.source.fallback_path)
    content_filter = ContentFilter(cfg.filters)
    fallback = prepare_fallback(fallback, content_filter)
    if strategies is None:
        strategies = build_strategies(cfg, fallback)

    chosen, _failures = resolve_pools(strategies)
    logger.info(
        "Using %d candidates from '%s'", pool_size(chosen.pools), chosen.source,
        extra={"source": chosen.source},
    )

    fresh, stale = partition_pools(chosen.pools, content_filter, ledger)
    fresh = reorder_for_reroll(fresh, info.day, nonce)
    stale = reorder_for_reroll(stale, info.day, nonce)

    selection = select_questions(fresh, stale=stale, fallback=fallback, config=cfg.selection)
    if selection.freshness_waived:
        logger.warning(
            "Not enough fresh questions; repeats allowed (%s)", selection.tier_counts(),
            extra={"day": info.day},
        )

    questions = build_output(selection.questions, info.day, nonce)
    artifact = DailyArtifact(
        day=info.day,
        day_index=info.index,
        questions=questions,
        reroll=bool(nonce),
        source=chosen.source,
    )
    try:
        validate_artifact(artifact.to_dict())
    except SchemaValidationError as e:
        raise InvalidArtifactError(f"Refusing to write invalid artifact for {info.day}", errors=e.errors) from e

    new_ledger = ledger.extend(output_key(q) for q in questions)
    write_outputs(artifact, cfg.paths.artifact, new_ledger, cfg.paths.ledger)

    logger.info(
        "Wrote artifact for %s (index %d, reroll=%s, source=%s)",
        info.day, info.index, artifact.reroll, chosen.source,
        extra={"day": info.day, "duration_ms": (time.time() - started) * 1000},
    )
    return RunResult(status=STATUS_WRITTEN, day=info, artifact=artifact, selection=selection)
