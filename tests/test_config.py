from __future__ import annotations

from pathlib import Path

import pytest

from dailyfive.config import (
    AppConfig,
    apply_env_overrides,
    default_app_config,
    load_config,
    reroll_nonce_from_env,
)

ROOT = Path(__file__).resolve().parents[1]


def test_defaults():
    cfg = AppConfig()
    assert cfg.schedule.epoch == "20250824"
    assert cfg.schedule.timezone == "America/New_York"
    assert cfg.selection.quota == {"easy": 2, "medium": 2, "hard": 1}
    assert cfg.filters.max_question_len == 110
    assert cfg.source.max_retries == 6


def test_json_roundtrip(tmp_path: Path):
    cfg = AppConfig()
    cfg.source.skip_api = True
    cfg.paths.max_ledger = 500
    p = tmp_path / "cfg.json"
    cfg.to_json(p)
    assert AppConfig.from_json(p) == cfg


def test_yaml_roundtrip(tmp_path: Path):
    cfg = AppConfig()
    cfg.filters.allow_categories = ["Sports"]
    cfg.logging.log_dir = None
    p = tmp_path / "cfg.yaml"
    cfg.to_yaml(p)
    assert load_config(p) == cfg


def test_bundled_default_yaml_matches_builtin_defaults():
    assert load_config(ROOT / "configs" / "default.yaml") == default_app_config()


def test_partial_yaml_keeps_other_defaults(tmp_path: Path):
    p = tmp_path / "cfg.yml"
    p.write_text("schedule:\n  epoch: 20250901\nselection:\n  category_cap: 3\n", encoding="utf-8")
    cfg = load_config(p)
    assert cfg.schedule.epoch == "20250901"
    assert cfg.selection.category_cap == 3
    assert cfg.selection.total == 5


def test_unknown_key_rejected(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text("paths:\n  artefact: x.json\n", encoding="utf-8")
    with pytest.raises(ValueError, match="artefact"):
        load_config(p)


@pytest.mark.parametrize("content", ["schedule: [unclosed\n", "- just\n- a list\n"])
def test_malformed_yaml_rejected(tmp_path: Path, content: str):
    p = tmp_path / "cfg.yaml"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(p)


def test_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "cfg.toml"
    p.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(p)


def test_none_gives_defaults():
    assert load_config(None) == AppConfig()


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SKIP_API", "true")
    monkeypatch.setenv("DAILYFIVE_LOG_LEVEL", "DEBUG")
    cfg = apply_env_overrides(AppConfig())
    assert cfg.source.skip_api is True
    assert cfg.logging.level == "DEBUG"


def test_env_overrides_absent(monkeypatch):
    monkeypatch.delenv("SKIP_API", raising=False)
    monkeypatch.delenv("DAILYFIVE_LOG_LEVEL", raising=False)
    assert apply_env_overrides(AppConfig()) == AppConfig()


def test_reroll_nonce_from_env(monkeypatch):
    monkeypatch.setenv("REROLL_NONCE", "  abc ")
    assert reroll_nonce_from_env() == "abc"
    monkeypatch.delenv("REROLL_NONCE")
    assert reroll_nonce_from_env() == ""


def test_to_json_leaves_no_temp_files(tmp_path: Path):
    p = tmp_path / "nested" / "cfg.json"
    AppConfig().to_json(p)
    AppConfig().to_json(p)
    assert [f.name for f in p.parent.iterdir()] == ["cfg.json"]
    assert load_config(p) == AppConfig()
