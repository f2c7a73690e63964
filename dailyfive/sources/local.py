from __future__ import annotations

import logging
from pathlib import Path

from ..data.loader import load_pools_dir, pool_size
from ..data.schemas import Pools
from ..qa.normalize import clean_question
from .base import SourceFailed, SourceOk, SourceResult

logger = logging.getLogger(__name__)


def _cleaned(pools: Pools) -> Pools:
    return {d: [clean_question(q) for q in qs] for d, qs in pools.items()}


class LocalPoolSource:
    """Pools read from ``<directory>/{easy,medium,hard}.json``."""

    name = "local"

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def fetch(self) -> SourceResult:
        pools = load_pools_dir(self.directory)
        if pool_size(pools) == 0:
            return SourceFailed(self.name, f"no local pools found in {self.directory}")
        logger.info("Loaded %d questions from local pools in %s", pool_size(pools), self.directory)
        return SourceOk(self.name, _cleaned(pools))


class StaticSource:
    """Last-resort dataset injected at startup, served as given.

    The pipeline cleans the dataset before handing it over; it is not cleaned
    again here so entity decoding stays single-pass.
    """

    name = "static"

    def __init__(self, dataset: Pools) -> None:
        self.dataset = dataset

    def fetch(self) -> SourceResult:
        if pool_size(self.dataset) == 0:
            return SourceFailed(self.name, "static dataset is empty")
        return SourceOk(self.name, {d: list(qs) for d, qs in self.dataset.items()})
