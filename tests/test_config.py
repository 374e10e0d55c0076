"""Tests for configuration loading."""

import pytest

from shadowing_grader.config import Config, PitchConfig, load_config


class TestConfig:
    """Tests for defaults and environment overrides."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.pitch.method == "yin"
        assert config.pitch.window_size == 1024
        assert config.pitch.hop_length == 512
        assert config.voice.silence_threshold == 0.01
        assert config.tone.flat_range_hz == 20.0
        assert config.analytics.weak_threshold == 75.0
        assert config.emotion_rules_path is None

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHADOWING_PITCH__FMAX", "600")
        monkeypatch.setenv("SHADOWING_ASSESSMENT__PROBLEM_WORD_THRESHOLD", "65")

        config = load_config()
        assert config.pitch.fmax == 600.0
        assert config.assessment.problem_word_threshold == 65.0

    def test_top_level_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHADOWING_LOG_LEVEL", "DEBUG")
        assert load_config().log_level == "DEBUG"

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            PitchConfig(window_size=0)
