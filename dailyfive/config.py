from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .daycount import DEFAULT_EPOCH, DEFAULT_TIMEZONE
from .qa.filters import FilterConfig
from .selection.selector import SelectionConfig
from .sources.opentdb import DEFAULT_API_URL
from .writer import write_json_atomic


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ScheduleConfig:
    epoch: str = DEFAULT_EPOCH
    timezone: str = DEFAULT_TIMEZONE

    def __post_init__(self) -> None:
        # YAML reads an unquoted 20250824 as an int
        self.epoch = str(self.epoch)


@dataclass
class SourceConfig:
    """Upstream API and fallback pool settings."""

    api_url: str = DEFAULT_API_URL
    chunk_sizes: Dict[str, List[int]] = field(
        default_factory=lambda: {"easy": [8], "medium": [8], "hard": [8]}
    )
    timeout: float = 12.0
    max_retries: int = 6
    backoff_base: float = 1.0
    max_backoff: float = 60.0
    jitter: float = 0.4
    politeness_delay: float = 0.3
    pools_dir: str = "pools"
    fallback_path: Optional[str] = None  # bundled dataset when unset
    skip_api: bool = False


@dataclass
class PathsConfig:
    artifact: str = "daily.json"
    ledger: str = "used.json"
    max_ledger: Optional[int] = None  # keep everything


@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_dir: Optional[str] = "logs"
    filename: str = "dailyfive.log"
    structured: bool = False

    def file_path(self) -> Optional[Path]:
        return Path(self.log_dir) / self.filename if self.log_dir else None


def _section(cls, payload: Any):
    if not isinstance(payload, dict):
        return cls()
    known = {f.name for f in fields(cls)}
    unknown = set(payload) - known
    if unknown:
        raise ValueError(f"Unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return cls(**payload)


@dataclass
class AppConfig:
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @staticmethod
    def from_dict(payload: Dict[str, Any]) -> "AppConfig":
        if not isinstance(payload, dict):
            raise ValueError(f"Config must be a mapping, got {type(payload).__name__}")
        return AppConfig(
            schedule=_section(ScheduleConfig, payload.get("schedule")),
            filters=_section(FilterConfig, payload.get("filters")),
            selection=_section(SelectionConfig, payload.get("selection")),
            source=_section(SourceConfig, payload.get("source")),
            paths=_section(PathsConfig, payload.get("paths")),
            logging=_section(LoggingConfig, payload.get("logging")),
        )

    @staticmethod
    def from_json(path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        return AppConfig.from_dict(payload or {})

    @staticmethod
    def from_yaml(path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            try:
                payload = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        return AppConfig.from_dict(payload or {})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, path: str | Path) -> None:
        write_json_atomic(path, self.to_dict())

    def to_yaml(self, path: str | Path) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with open(p, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False, allow_unicode=True)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load JSON or YAML config by suffix; ``None`` gives the defaults.

    Raises:
        FileNotFoundError: If ``path`` doesn't exist
        ValueError: If a section has unknown keys or the suffix is unsupported
    """
    if path is None:
        return default_app_config()
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {p}")
    if p.suffix in {".yaml", ".yml"}:
        return AppConfig.from_yaml(p)
    if p.suffix == ".json":
        return AppConfig.from_json(p)
    raise ValueError(f"Expected .json, .yaml or .yml config, got: {p.suffix}")


def apply_env_overrides(cfg: AppConfig) -> AppConfig:
    """Apply ``SKIP_API`` and ``DAILYFIVE_LOG_LEVEL`` from the environment."""
    if _env_flag("SKIP_API"):
        cfg.source.skip_api = True
    level = os.getenv("DAILYFIVE_LOG_LEVEL")
    if level:
        cfg.logging.level = level
    return cfg


def reroll_nonce_from_env() -> str:
    return os.getenv("REROLL_NONCE", "").strip()


def default_app_config() -> AppConfig:
    return AppConfig()
