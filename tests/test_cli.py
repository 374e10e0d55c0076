"""Tests for the command-line interface."""

import json
from pathlib import Path

import numpy as np
import pytest
from typer.testing import CliRunner

from conftest import SAMPLE_RATE, sine, write_wav
from shadowing_grader.analytics import SessionStore
from shadowing_grader.cli import app

runner = CliRunner()

PARTIAL = {
    "text": "你好",
    "accuracyScore": 90,
    "fluencyScore": 85,
    "completenessScore": 100,
    "pronScore": 88,
    "words": [{"word": "你好", "accuracyScore": 90, "errorType": "None"}],
}


@pytest.fixture
def tone_wav(tmp_path: Path) -> Path:
    return write_wav(tmp_path / "tone.wav", sine(220.0, 0.5))


@pytest.fixture
def partials_file(tmp_path: Path) -> Path:
    path = tmp_path / "partials.json"
    path.write_text(json.dumps([PARTIAL], ensure_ascii=False), encoding="utf-8")
    return path


class TestAggregateCommand:
    """Tests for `shadowing-grader aggregate`."""

    def test_table_output(self, partials_file: Path) -> None:
        result = runner.invoke(app, ["aggregate", str(partials_file), "--recognized", "你好", "--expected", "你好"])

        assert result.exit_code == 0
        assert "Accuracy" in result.output
        assert "excellent" in result.output

    def test_json_output(self, partials_file: Path) -> None:
        result = runner.invoke(app, ["aggregate", str(partials_file), "--expected", "你好", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["accuracy_score"] == 90.0
        assert data["error_statistics"]["correct_words"] == 1

    def test_single_object_file(self, tmp_path: Path) -> None:
        path = tmp_path / "one.json"
        path.write_text(json.dumps(PARTIAL), encoding="utf-8")
        result = runner.invoke(app, ["aggregate", str(path), "--expected", "你好"])
        assert result.exit_code == 0

    def test_no_partials(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("[]", encoding="utf-8")

        result = runner.invoke(app, ["aggregate", str(path)])
        assert result.exit_code == 1
        assert "no_partial_results" in result.output


class TestPitchCommand:
    """Tests for `shadowing-grader pitch`."""

    def test_voiced_recording(self, tone_wav: Path) -> None:
        result = runner.invoke(app, ["pitch", str(tone_wav)])
        assert result.exit_code == 0
        assert "Voiced" in result.output

    def test_silent_recording(self, tmp_path: Path) -> None:
        path = write_wav(tmp_path / "silence.wav", np.zeros(SAMPLE_RATE // 2))
        result = runner.invoke(app, ["pitch", str(path)])
        assert result.exit_code == 0
        assert "No voiced frames" in result.output

    def test_unknown_method(self, tone_wav: Path) -> None:
        result = runner.invoke(app, ["pitch", str(tone_wav), "--method", "cepstrum"])
        assert result.exit_code == 1


class TestAnalyzeCommand:
    """Tests for `shadowing-grader analyze`."""

    def test_tones_and_emotion(self, tone_wav: Path) -> None:
        result = runner.invoke(app, ["analyze", str(tone_wav), "--text", "妈"])

        assert result.exit_code == 0
        assert "Tones" in result.output
        assert "Emotion:" in result.output

    def test_bad_emotion_rules_file(self, tone_wav: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        rules = tmp_path / "rules.json"
        rules.write_text("{broken", encoding="utf-8")
        monkeypatch.setenv("SHADOWING_EMOTION_RULES_PATH", str(rules))

        result = runner.invoke(app, ["analyze", str(tone_wav), "--text", "妈"])
        assert result.exit_code == 1
        assert "Cannot load emotion rules" in result.output

    def test_with_partials_and_session_log(self, tone_wav: Path, partials_file: Path, tmp_path: Path) -> None:
        log_path = tmp_path / "sessions.json"
        args = ["analyze", str(tone_wav), "--text", "你好", "--partials", str(partials_file), "--sessions", str(log_path)]

        assert runner.invoke(app, args).exit_code == 0
        result = runner.invoke(app, args)

        assert result.exit_code == 0
        assert "Assessment" in result.output
        sessions = SessionStore(log_path).load()
        assert len(sessions) == 2
        assert sessions[0].scores.accuracy == 90.0


class TestProfileCommand:
    """Tests for `shadowing-grader profile`."""

    def test_profile(self, tmp_path: Path, make_session) -> None:
        path = tmp_path / "sessions.json"
        SessionStore(path).save([make_session(60, days_ago=i) for i in range(5)])

        result = runner.invoke(app, ["profile", str(path), "--top", "2"])

        assert result.exit_code == 0
        assert "Profile (5 sessions)" in result.output
        assert "accuracy" in result.output

    def test_no_sessions(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["profile", str(tmp_path / "missing.json")])
        assert result.exit_code == 0
        assert "No sessions yet" in result.output

    def test_corrupt_log(self, tmp_path: Path) -> None:
        path = tmp_path / "sessions.json"
        path.write_text("not json", encoding="utf-8")
        result = runner.invoke(app, ["profile", str(path)])
        assert result.exit_code == 1
