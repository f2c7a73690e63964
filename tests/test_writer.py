from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from dailyfive.data.schemas import DailyArtifact, OutputQuestion
from dailyfive.errors import ArtifactWriteError
from dailyfive.ledger import Ledger
from dailyfive.writer import read_artifact, write_json_atomic, write_outputs


def _artifact(day="20250825"):
    q = OutputQuestion("What is the capital of Japan?", ["Kyoto", "Tokyo", "Osaka", "Nagoya"], 1, "easy", "Geography")
    return DailyArtifact(day=day, day_index=2, questions=[q] * 5, source="static")


def _fail_replace_into(target: Path):
    real_replace = os.replace

    def fake(src, dst):
        if Path(dst) == target:
            raise OSError("disk full")
        return real_replace(src, dst)

    return fake


class TestWriteJsonAtomic:
    def test_writes_and_creates_parent(self, tmp_path: Path):
        p = tmp_path / "nested" / "out.json"
        write_json_atomic(p, {"a": "é"})
        assert json.loads(p.read_text(encoding="utf-8")) == {"a": "é"}
        assert os.listdir(p.parent) == ["out.json"]

    def test_failed_replace_keeps_old_file(self, tmp_path: Path):
        p = tmp_path / "out.json"
        p.write_text('{"old": true}', encoding="utf-8")
        with patch("dailyfive.writer.os.replace", side_effect=OSError("nope")):
            with pytest.raises(OSError):
                write_json_atomic(p, {"new": True})
        assert json.loads(p.read_text(encoding="utf-8")) == {"old": True}
        assert os.listdir(tmp_path) == ["out.json"]


class TestReadArtifact:
    def test_missing(self, tmp_path: Path):
        assert read_artifact(tmp_path / "daily.json") is None

    @pytest.mark.parametrize("content", ["{oops", "[1, 2]"])
    def test_unreadable(self, tmp_path: Path, content):
        p = tmp_path / "daily.json"
        p.write_text(content, encoding="utf-8")
        assert read_artifact(p) is None


class TestWriteOutputs:
    def test_writes_both(self, tmp_path: Path):
        art, led = tmp_path / "daily.json", tmp_path / "used.json"
        write_outputs(_artifact(), art, Ledger(["k1", "k2"]), led)
        payload = json.loads(art.read_text(encoding="utf-8"))
        assert payload["day"] == "20250825"
        assert payload["dayIndex"] == 2
        assert len(payload["questions"]) == 5
        assert json.loads(led.read_text(encoding="utf-8")) == {"seen": ["k1", "k2"]}
        assert sorted(os.listdir(tmp_path)) == ["daily.json", "used.json"]

    def test_ledger_failure_restores_previous_artifact(self, tmp_path: Path):
        art, led = tmp_path / "daily.json", tmp_path / "used.json"
        art.write_text('{"day": "20250824"}', encoding="utf-8")
        with patch("dailyfive.writer.os.replace", side_effect=_fail_replace_into(led)):
            with pytest.raises(ArtifactWriteError):
                write_outputs(_artifact(), art, Ledger(["k1"]), led)
        assert json.loads(art.read_text(encoding="utf-8")) == {"day": "20250824"}
        assert os.listdir(tmp_path) == ["daily.json"]

    def test_ledger_failure_removes_new_artifact(self, tmp_path: Path):
        art, led = tmp_path / "daily.json", tmp_path / "used.json"
        with patch("dailyfive.writer.os.replace", side_effect=_fail_replace_into(led)):
            with pytest.raises(ArtifactWriteError):
                write_outputs(_artifact(), art, Ledger(["k1"]), led)
        assert os.listdir(tmp_path) == []

    def test_artifact_failure_leaves_ledger(self, tmp_path: Path):
        art, led = tmp_path / "daily.json", tmp_path / "used.json"
        led.write_text('{"seen": ["old"]}', encoding="utf-8")
        with patch("dailyfive.writer.os.replace", side_effect=_fail_replace_into(art)):
            with pytest.raises(ArtifactWriteError):
                write_outputs(_artifact(), art, Ledger(["old", "new"]), led)
        assert json.loads(led.read_text(encoding="utf-8")) == {"seen": ["old"]}
        assert os.listdir(tmp_path) == ["used.json"]
