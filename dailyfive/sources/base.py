"""Question sources tried in order until one yields candidate pools."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, Union

from ..data.schemas import Pools
from ..errors import SourceUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceOk:
    source: str
    pools: Pools = field(default_factory=dict)

    ok = True


@dataclass(frozen=True)
class SourceFailed:
    source: str
    reason: str

    ok = False


SourceResult = Union[SourceOk, SourceFailed]


class SourceStrategy(Protocol):
    name: str

    def fetch(self) -> SourceResult:
        """Produce difficulty-keyed pools, reporting expected failures as ``SourceFailed``."""
        ...


def resolve_pools(strategies: Sequence[SourceStrategy]) -> tuple[SourceOk, list[SourceFailed]]:
    """Return the first successful source plus the failures before it.

    Raises:
        SourceUnavailableError: If every strategy failed.
    """
    failures: list[SourceFailed] = []
    for strategy in strategies:
        result = strategy.fetch()
        if isinstance(result, SourceOk):
            if failures:
                logger.warning(
                    "Using fallback source '%s' after %d failed source(s)",
                    result.source,
                    len(failures),
                    extra={"source": result.source},
                )
            return result, failures
        logger.warning(
            "Source '%s' unavailable: %s", result.source, result.reason,
            extra={"source": result.source},
        )
        failures.append(result)
    raise SourceUnavailableError(
        f"All {len(failures)} question sources failed", failures=failures
    )
