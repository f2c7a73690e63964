"""Loading of bundled and local question pools."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .schemas import DIFFICULTIES, Pools, RawQuestion, empty_pools

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_PATH = Path(__file__).resolve().parent / "fallback.json"


def records_to_questions(rows: Any, difficulty: Optional[str] = None) -> List[RawQuestion]:
    """Convert a list of upstream-shaped records, skipping malformed rows."""
    if not isinstance(rows, list):
        return []
    out: List[RawQuestion] = []
    for row in rows:
        try:
            out.append(RawQuestion.from_record(row, difficulty=difficulty))
        except ValueError as e:
            logger.debug("Skipping malformed record: %s", e)
    return out


def load_pool_file(path: Union[str, Path], difficulty: Optional[str] = None) -> List[RawQuestion]:
    """Load one JSON array of records; missing or corrupt files give ``[]``."""
    filepath = Path(path)
    if not filepath.is_file():
        return []
    try:
        with open(filepath, encoding="utf-8") as f:
            rows = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Could not read pool %s: %s", filepath, e)
        return []
    return records_to_questions(rows, difficulty=difficulty)


def load_pools_dir(directory: Union[str, Path]) -> Pools:
    """Load ``easy.json``, ``medium.json`` and ``hard.json`` from a directory."""
    root = Path(directory)
    return {d: load_pool_file(root / f"{d}.json", difficulty=d) for d in DIFFICULTIES}


def load_fallback_dataset(path: Union[str, Path, None] = None) -> Pools:
    """Load the last-resort dataset, a JSON object keyed by difficulty.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not an object of difficulty -> records
    """
    filepath = Path(path) if path else DEFAULT_FALLBACK_PATH
    if not filepath.exists():
        raise FileNotFoundError(f"Fallback dataset not found: {filepath}")
    with open(filepath, encoding="utf-8") as f:
        try:
            payload: Dict[str, Any] = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in fallback dataset {filepath}: {e}") from e
    if not isinstance(payload, dict):
        raise ValueError(f"Fallback dataset must be an object keyed by difficulty: {filepath}")
    pools = empty_pools()
    for d in DIFFICULTIES:
        pools[d] = records_to_questions(payload.get(d, []), difficulty=d)
    return pools


def pool_size(pools: Pools) -> int:
    return sum(len(v) for v in pools.values())
