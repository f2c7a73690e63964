"""Ledger of previously served questions."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Dict, List, Optional

from .data.schemas import RawQuestion
from .qa.normalize import key_for

logger = logging.getLogger(__name__)

SEEN_KEY = "seen"


class Ledger:
    """Ordered set of question keys, oldest first.

    Read fully at start of a run and written fully at the end; concurrent
    writers are not supported.
    """

    def __init__(
        self,
        seen: Iterable[str] = (),
        max_size: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.max_size = max_size
        self.extra = dict(extra or {})
        self._keys: Dict[str, None] = dict.fromkeys(seen)
        self._trim()

    @classmethod
    def load(cls, path: str | Path, max_size: Optional[int] = None) -> "Ledger":
        """Read a ledger file; missing or corrupt files give an empty ledger."""
        p = Path(path)
        if not p.exists():
            return cls(max_size=max_size)
        try:
            payload = json.loads(p.read_text(encoding="utf-8") or "{}")
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Ledger %s unreadable (%s); starting empty", p, e)
            return cls(max_size=max_size)
        if not isinstance(payload, dict):
            logger.warning("Ledger %s is not a JSON object; starting empty", p)
            return cls(max_size=max_size)
        seen = payload.pop(SEEN_KEY, [])
        if not isinstance(seen, list):
            logger.warning("Ledger %s has a malformed '%s' entry; ignoring it", p, SEEN_KEY)
            seen = []
        return cls(
            (k for k in seen if isinstance(k, str)),
            max_size=max_size,
            extra=payload,
        )

    def _trim(self) -> None:
        if self.max_size is None or self.max_size < 0:
            return
        excess = len(self._keys) - self.max_size
        for key in list(self._keys)[:max(0, excess)]:
            del self._keys[key]

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)

    @property
    def keys(self) -> List[str]:
        return list(self._keys)

    def is_fresh(self, q: RawQuestion) -> bool:
        return key_for(q) not in self._keys

    def extend(self, keys: Iterable[str]) -> "Ledger":
        """Return a new ledger with ``keys`` appended as the newest entries."""
        merged = dict(self._keys)
        for key in keys:
            merged.pop(key, None)
            merged[key] = None
        return Ledger(merged, max_size=self.max_size, extra=self.extra)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extra, SEEN_KEY: self.keys}
