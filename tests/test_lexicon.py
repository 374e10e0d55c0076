"""Tests for the reference tone dictionary."""

import json
from pathlib import Path

import pytest

from shadowing_grader.errors import ToneDictionaryError
from shadowing_grader.lexicon import ToneDictionary, _tone_from_pinyin, cjk_characters


class TestCjkCharacters:
    """Tests for ideograph extraction."""

    def test_strips_punctuation_and_latin(self) -> None:
        assert cjk_characters("你好, world！吗?") == ["你", "好", "吗"]

    def test_empty(self) -> None:
        assert cjk_characters("") == []


class TestToneFromPinyin:
    """Tests for TONE3 pinyin parsing."""

    @pytest.mark.parametrize(
        "syllable, tone",
        [("hao3", 3), ("ma1", 1), ("ma5", 0), ("men", 0), ("lv4", 4)],
    )
    def test_parse(self, syllable: str, tone: int) -> None:
        assert _tone_from_pinyin(syllable) == tone


class TestToneDictionary:
    """Tests for tone lookup."""

    def test_sample_words(self) -> None:
        dictionary = ToneDictionary()
        assert dictionary.tones_for("你好吗") == [3, 3, 0]
        assert dictionary.tones_for("谢谢") == [4, 0]

    def test_longest_match_wins(self) -> None:
        """A word entry overrides the single-character tones."""
        dictionary = ToneDictionary(entries={"一": 1, "一个": [2, 0], "个": 4})
        assert dictionary.tones_for("一个") == [2, 0]
        assert dictionary.tones_for("个一") == [4, 1]

    def test_unknown_defaults_to_first_tone(self) -> None:
        dictionary = ToneDictionary(entries={})
        assert dictionary.tones_for("龘龘") == [1, 1]

    def test_ignores_non_cjk(self) -> None:
        assert ToneDictionary().tones_for("ok 马!") == [3]

    def test_add_validates_length(self) -> None:
        dictionary = ToneDictionary(entries={})
        with pytest.raises(ToneDictionaryError):
            dictionary.add("你好", [3])

    def test_add_validates_range(self) -> None:
        dictionary = ToneDictionary(entries={})
        with pytest.raises(ToneDictionaryError):
            dictionary.add("你", [5])

    def test_container_protocol(self) -> None:
        dictionary = ToneDictionary(entries={"你": 3, "你好": [3, 3]})
        assert len(dictionary) == 2
        assert "你好" in dictionary
        assert sorted(dictionary) == ["你", "你好"]
        assert dictionary.max_word_length == 2

    def test_pypinyin_fallback(self) -> None:
        """Unknown characters are looked up with pypinyin when enabled."""
        dictionary = ToneDictionary(entries={}, use_pypinyin=True)
        assert dictionary.lookup("好") == 3
        assert dictionary.lookup("妈") == 1
        assert dictionary.tones_for("学习") == [2, 2]


class TestToneDictionaryFiles:
    """Tests for loading and saving dictionaries."""

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "tones.json"
        path.write_text(json.dumps({"你好": [3, 3], "吗": [0]}, ensure_ascii=False), encoding="utf-8")

        dictionary = ToneDictionary.load(path)
        assert dictionary.tones_for("你好吗") == [3, 3, 0]

    def test_to_json_reloads(self, tmp_path: Path) -> None:
        path = tmp_path / "tones.json"
        path.write_text(ToneDictionary().to_json(), encoding="utf-8")
        assert len(ToneDictionary.load(path)) == len(ToneDictionary())

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ToneDictionaryError):
            ToneDictionary.load(tmp_path / "missing.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ToneDictionaryError):
            ToneDictionary.load(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ToneDictionaryError):
            ToneDictionary.load(path)

    def test_bad_entry(self, tmp_path: Path) -> None:
        path = tmp_path / "bad_entry.json"
        path.write_text(json.dumps({"你好": [3]}), encoding="utf-8")
        with pytest.raises(ToneDictionaryError):
            ToneDictionary.load(path)
