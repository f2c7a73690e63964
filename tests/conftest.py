from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dailyfive.config import AppConfig  # noqa: E402
from dailyfive.data.schemas import RawQuestion  # noqa: E402
from dailyfive.utils.logging import reset_logging  # noqa: E402


# ====================
# Question Fixtures
# ====================

def make_record(
    n: int,
    difficulty: str = "easy",
    category: str | None = "Geography",
    prefix: str = "What is sample item",
) -> Dict[str, Any]:
    """Upstream-shaped record that passes the default filter."""
    return {
        "type": "multiple",
        "difficulty": difficulty,
        "category": category,
        "question": f"{prefix} {difficulty} {n}?",
        "correct_answer": f"Right {difficulty} {n}",
        "incorrect_answers": [f"Wrong {difficulty} {n}a", f"Wrong {difficulty} {n}b", f"Wrong {difficulty} {n}c"],
    }


def make_question(n: int, difficulty: str = "easy", category: str | None = "Geography") -> RawQuestion:
    return RawQuestion.from_record(make_record(n, difficulty, category))


def make_pool_records(difficulty: str, count: int, category: str | None = "Geography") -> List[Dict[str, Any]]:
    return [make_record(i, difficulty, category) for i in range(count)]


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def question_factory():
    return make_question


@pytest.fixture
def pools_dir(tmp_path: Path) -> Path:
    """Local pools with enough material for several days."""
    d = tmp_path / "pools"
    d.mkdir()
    categories = ["Geography", "Sports", "Science & Nature", "General Knowledge"]
    for difficulty in ("easy", "medium", "hard"):
        rows = [make_record(i, difficulty, categories[i % len(categories)]) for i in range(8)]
        (d / f"{difficulty}.json").write_text(json.dumps(rows), encoding="utf-8")
    return d


@pytest.fixture
def app_config(tmp_path: Path, pools_dir: Path) -> AppConfig:
    """Offline config writing into a temp directory."""
    cfg = AppConfig()
    cfg.paths.artifact = str(tmp_path / "out" / "daily.json")
    cfg.paths.ledger = str(tmp_path / "out" / "used.json")
    cfg.source.pools_dir = str(pools_dir)
    cfg.source.skip_api = True
    cfg.logging.log_dir = None
    return cfg


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()
