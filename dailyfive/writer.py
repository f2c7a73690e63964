"""Persistence of the daily artifact and the ledger."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

from .data.schemas import DailyArtifact
from .errors import ArtifactWriteError
from .ledger import Ledger

logger = logging.getLogger(__name__)


def _stage_json(path: Path, payload: Any) -> Path:
    """Write ``payload`` to a temp file next to ``path`` and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise
    return Path(tmp)


def write_json_atomic(path: str | Path, payload: Any) -> None:
    """Replace ``path`` with ``payload`` via write-temp-then-rename."""
    target = Path(path)
    tmp = _stage_json(target, payload)
    try:
        os.replace(tmp, target)
    except OSError:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise


def read_artifact(path: str | Path) -> Optional[dict]:
    """Previous artifact payload, or ``None`` if missing or unreadable."""
    p = Path(path)
    if not p.exists():
        return None
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Existing artifact %s unreadable: %s", p, e)
        return None
    return payload if isinstance(payload, dict) else None


def write_outputs(
    artifact: DailyArtifact,
    artifact_path: str | Path,
    ledger: Ledger,
    ledger_path: str | Path,
) -> None:
    """Persist artifact and ledger together.

    Both documents are staged before either target is touched. If the ledger
    cannot be swapped in, the previous artifact is put back.

    Raises:
        ArtifactWriteError: If either document could not be written.
    """
    artifact_path = Path(artifact_path)
    ledger_path = Path(ledger_path)
    staged: list[Path] = []
    try:
        artifact_tmp = _stage_json(artifact_path, artifact.to_dict())
        staged.append(artifact_tmp)
        ledger_tmp = _stage_json(ledger_path, ledger.to_dict())
        staged.append(ledger_tmp)
    except OSError as e:
        for tmp in staged:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
        raise ArtifactWriteError(f"Could not stage outputs: {e}") from e

    previous = artifact_path.read_bytes() if artifact_path.exists() else None
    try:
        os.replace(artifact_tmp, artifact_path)
    except OSError as e:
        for tmp in staged:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
        raise ArtifactWriteError(f"Could not write artifact {artifact_path}: {e}") from e

    try:
        os.replace(ledger_tmp, ledger_path)
    except OSError as e:
        with contextlib.suppress(OSError):
            os.unlink(ledger_tmp)
        _restore(artifact_path, previous)
        raise ArtifactWriteError(f"Could not write ledger {ledger_path}: {e}") from e

    logger.info("Wrote %s and %s", artifact_path, ledger_path)


def _restore(path: Path, previous: Optional[bytes]) -> None:
    try:
        if previous is None:
            path.unlink()
            return
        fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".bak", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(previous)
        os.replace(tmp, path)
    except OSError as e:
        logger.error("Could not restore previous artifact %s: %s", path, e)
