"""Data schemas for the Daily Five generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

DIFFICULTIES: Tuple[str, ...] = ("easy", "medium", "hard")


class RawQuestion(NamedTuple):
    """Candidate question in the upstream trivia-API shape."""
    question: str
    correct_answer: str
    incorrect_answers: Tuple[str, ...]
    category: Optional[str] = None
    difficulty: str = "medium"

    @classmethod
    def from_record(cls, record: Dict[str, Any], difficulty: Optional[str] = None) -> "RawQuestion":
        """Build from an API/pool record; ``text`` is accepted for ``question``.

        Raises:
            ValueError: If the record is not a mapping.
        """
        if not isinstance(record, dict):
            raise ValueError(f"Invalid record format: expected dict, got {type(record).__name__}")
        incorrect = record.get("incorrect_answers") or []
        if not isinstance(incorrect, (list, tuple)):
            incorrect = []
        category = record.get("category")
        return cls(
            question=str(record.get("question") or record.get("text") or ""),
            correct_answer=str(record.get("correct_answer") or ""),
            incorrect_answers=tuple(str(x) for x in incorrect if x is not None),
            category=str(category) if category else None,
            difficulty=str(record.get("difficulty") or difficulty or "medium").lower(),
        )

    @property
    def options(self) -> List[str]:
        return [self.correct_answer, *self.incorrect_answers]


@dataclass
class OutputQuestion:
    text: str
    options: List[str]
    correct: int
    difficulty: str
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "text": self.text,
            "options": list(self.options),
            "correct": self.correct,
            "difficulty": self.difficulty,
        }
        if self.category:
            out["category"] = self.category
        return out


@dataclass
class DailyArtifact:
    """The daily file read by the front end."""
    day: str
    day_index: int
    questions: Sequence[OutputQuestion] = field(default_factory=list)
    reroll: bool = False
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "day": self.day,
            "dayIndex": self.day_index,
            "reroll": self.reroll,
        }
        if self.source:
            out["source"] = self.source
        out["questions"] = [q.to_dict() for q in self.questions]
        return out


Pools = Dict[str, List[RawQuestion]]


def empty_pools() -> Pools:
    return {d: [] for d in DIFFICULTIES}
