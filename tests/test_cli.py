from __future__ import annotations

import json
from pathlib import Path

import pytest

from dailyfive.cli.main import main


@pytest.fixture
def config_file(app_config, tmp_path: Path) -> Path:
    p = tmp_path / "cfg.yaml"
    app_config.to_yaml(p)
    return p


@pytest.fixture(autouse=True)
def _no_env(monkeypatch):
    for name in ("REROLL_NONCE", "SKIP_API", "DAILYFIVE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestDayCommand:
    @pytest.mark.parametrize(
        "date,expected",
        [("2025-08-24", 1), ("2025-08-25", 2), ("2025-09-24", 32), ("2025-01-01", 1)],
    )
    def test_prints_day_and_index(self, date, expected, capsys, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert main(["day", "--date", date]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out == {"day": date.replace("-", ""), "dayIndex": expected}

    def test_bad_date(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        assert main(["day", "--date", "25/08/2025"]) == 1

    def test_invalid_config(self, tmp_path):
        p = tmp_path / "cfg.yaml"
        p.write_text("bogus:\n  key: 1\nschedule:\n  nope: 1\n", encoding="utf-8")
        assert main(["day", "-c", str(p)]) == 1

    def test_missing_config(self, tmp_path):
        assert main(["day", "-c", str(tmp_path / "absent.yaml")]) == 1


class TestGenerateCommand:
    def test_generate_then_validate(self, config_file, app_config, capsys):
        assert main(["generate", "-c", str(config_file)]) == 0
        assert "Wrote" in capsys.readouterr().out
        assert Path(app_config.paths.artifact).exists()
        assert Path(app_config.paths.ledger).exists()

        assert main(["validate", app_config.paths.artifact]) == 0
        assert "OK" in capsys.readouterr().out

    def test_second_run_same_day_is_unchanged(self, config_file, capsys):
        assert main(["generate", "-c", str(config_file)]) == 0
        capsys.readouterr()
        assert main(["generate", "-c", str(config_file)]) == 0
        assert "already present" in capsys.readouterr().out

    def test_nonce_marks_reroll(self, config_file, app_config):
        assert main(["generate", "-c", str(config_file), "--nonce", "abc"]) == 0
        payload = json.loads(Path(app_config.paths.artifact).read_text(encoding="utf-8"))
        assert payload["reroll"] is True

    def test_path_overrides(self, config_file, tmp_path):
        art = tmp_path / "elsewhere" / "today.json"
        led = tmp_path / "elsewhere" / "seen.json"
        assert main(["generate", "-c", str(config_file), "--artifact", str(art), "--ledger", str(led)]) == 0
        assert art.exists() and led.exists()

    def test_no_sources_exits_nonzero(self, app_config, tmp_path, capsys):
        empty = tmp_path / "empty.json"
        empty.write_text(json.dumps({"easy": [], "medium": [], "hard": []}), encoding="utf-8")
        app_config.source.pools_dir = str(tmp_path / "missing")
        app_config.source.fallback_path = str(empty)
        p = tmp_path / "cfg.yaml"
        app_config.to_yaml(p)

        assert main(["generate", "-c", str(p)]) == 1
        assert "Error" in capsys.readouterr().out
        assert not Path(app_config.paths.artifact).exists()

    def test_missing_fallback_dataset_exits_nonzero(self, app_config, tmp_path, capsys):
        app_config.source.fallback_path = str(tmp_path / "nope.json")
        p = tmp_path / "cfg.yaml"
        app_config.to_yaml(p)

        assert main(["generate", "-c", str(p)]) == 1
        assert "Fallback dataset not found" in capsys.readouterr().out
        assert not Path(app_config.paths.artifact).exists()

    def test_malformed_fallback_dataset_exits_nonzero(self, app_config, tmp_path, capsys):
        bad = tmp_path / "fallback.json"
        bad.write_text("[]", encoding="utf-8")
        app_config.source.fallback_path = str(bad)
        p = tmp_path / "cfg.yaml"
        app_config.to_yaml(p)

        assert main(["generate", "-c", str(p)]) == 1
        assert "Fallback dataset must be an object" in capsys.readouterr().out


class TestValidateCommand:
    def test_schema_failure_exit_code(self, tmp_path, capsys):
        p = tmp_path / "daily.json"
        p.write_text(json.dumps({"day": "20250825", "dayIndex": 2, "questions": []}), encoding="utf-8")
        assert main(["validate", str(p)]) == 4
        assert "Schema validation failed" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert main(["validate", str(tmp_path / "nope.json")]) == 1


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "generate" in capsys.readouterr().out
