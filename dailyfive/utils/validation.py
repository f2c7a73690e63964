"""Schema validation for the daily artifact."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Base exception for validation errors."""
    pass


class SchemaValidationError(ValidationError):
    """Raised when data doesn't match expected schema."""
    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        return super().__str__() + ": " + "; ".join(self.errors)


@dataclass
class FieldSpec:
    """Specification for a data field."""
    name: str
    type: Any
    required: bool = True
    nullable: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None
    choices: Optional[List[Any]] = None
    validator: Optional[Callable[[Any], bool]] = None


ARTIFACT_FIELDS = [
    FieldSpec(name="day", type=str, pattern=r"^\d{8}$"),
    FieldSpec(name="dayIndex", type=int, validator=lambda v: v >= 1 and not isinstance(v, bool)),
    FieldSpec(name="questions", type=list, min_length=5, max_length=5),
    FieldSpec(name="reroll", type=bool, required=False),
    FieldSpec(name="source", type=str, required=False, nullable=True),
]

QUESTION_FIELDS = [
    FieldSpec(name="text", type=str, min_length=1),
    FieldSpec(name="options", type=list, min_length=4, max_length=4),
    FieldSpec(name="correct", type=int, validator=lambda v: not isinstance(v, bool)),
    FieldSpec(name="difficulty", type=str, choices=["easy", "medium", "hard"]),
    FieldSpec(name="category", type=str, required=False, nullable=True),
]


def validate_fields(record: Dict[str, Any], fields: List[FieldSpec]) -> List[str]:
    """Validate a single record against field specs.

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []
    for spec in fields:
        if spec.name not in record:
            if spec.required:
                errors.append(f"Missing required field: {spec.name}")
            continue

        value = record[spec.name]
        if value is None:
            if not spec.nullable:
                errors.append(f"Field {spec.name} cannot be null")
            continue

        if not isinstance(value, spec.type):
            errors.append(
                f"Field {spec.name} has wrong type: expected {spec.type.__name__}, "
                f"got {type(value).__name__}"
            )
            continue

        if isinstance(value, (str, list)):
            if spec.min_length is not None and len(value) < spec.min_length:
                errors.append(f"Field {spec.name} too short: minimum {spec.min_length}")
            if spec.max_length is not None and len(value) > spec.max_length:
                errors.append(f"Field {spec.name} too long: maximum {spec.max_length}")
        if isinstance(value, str) and spec.pattern:
            import re
            if not re.match(spec.pattern, value):
                errors.append(f"Field {spec.name} doesn't match pattern: {spec.pattern}")

        if spec.choices and value not in spec.choices:
            errors.append(f"Field {spec.name} has invalid value: must be one of {spec.choices}")

        if spec.validator:
            try:
                if not spec.validator(value):
                    errors.append(f"Field {spec.name} failed custom validation")
            except Exception as e:
                errors.append(f"Field {spec.name} validation error: {e}")
    return errors


def validate_question(question: Any) -> List[str]:
    if not isinstance(question, dict):
        return [f"expected object, got {type(question).__name__}"]
    errors = validate_fields(question, QUESTION_FIELDS)
    if errors:
        return errors
    options = question["options"]
    if not all(isinstance(o, str) and o for o in options):
        errors.append("options must be non-empty strings")
    if len(set(options)) != len(options):
        errors.append("options must be distinct")
    if not 0 <= question["correct"] < len(options):
        errors.append(f"correct index {question['correct']} is out of range")
    return errors


def validate_artifact(payload: Any) -> None:
    """Check an artifact against the front-end contract.

    Raises:
        SchemaValidationError: If validation fails
    """
    if not isinstance(payload, dict):
        raise SchemaValidationError("Artifact must be a JSON object")
    errors = validate_fields(payload, ARTIFACT_FIELDS)
    for i, q in enumerate(payload.get("questions") or []):
        errors.extend(f"Question {i}: {e}" for e in validate_question(q))
    if errors:
        raise SchemaValidationError(
            f"Artifact validation failed with {len(errors)} errors", errors=errors
        )


def validate_artifact_file(filepath: Union[str, Path]) -> Dict[str, Any]:
    """Validate an artifact file and return its payload.

    Raises:
        FileNotFoundError: If file doesn't exist
        SchemaValidationError: If the file is not valid JSON or fails validation
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Artifact file not found: {filepath}")
    try:
        payload = json.loads(filepath.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise SchemaValidationError(f"Invalid JSON in {filepath}: {e}")
    validate_artifact(payload)
    logger.info(f"Artifact validation passed: {filepath}")
    return payload
