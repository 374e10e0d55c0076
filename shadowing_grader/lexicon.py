"""Reference tone lookup for target sentences.

The tone dictionary maps words or single characters to their tone
sequence. Longest dictionary words are matched first, then single
characters; anything unknown falls back to pypinyin (when enabled) and
finally to tone 1.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Iterator, Mapping, cast

from pypinyin import Style, pinyin

from .errors import ToneDictionaryError
from .types import Tone

logger = logging.getLogger(__name__)

CJK_PATTERN = re.compile(r"[\u3400-\u4dbf\u4e00-\u9fff]")

DEFAULT_TONE: Tone = 1

# Small built-in sample; real deployments load a complete dictionary.
SAMPLE_TONES: dict[str, tuple[int, ...]] = {
    "你好": (3, 3),
    "谢谢": (4, 0),
    "再见": (4, 4),
    "中国": (1, 2),
    "学习": (2, 2),
    "老师": (3, 1),
    "朋友": (2, 0),
    "汉语": (4, 3),
    "新闻": (1, 2),
    "今天": (1, 1),
    "我们": (3, 0),
    "妈": (1,),
    "麻": (2,),
    "马": (3,),
    "骂": (4,),
    "吗": (0,),
    "的": (0,),
    "我": (3,),
    "你": (3,),
    "他": (1,),
    "是": (4,),
    "不": (4,),
    "一": (1,),
    "人": (2,),
    "大": (4,),
    "好": (3,),
}


def cjk_characters(text: str) -> list[str]:
    """Return the CJK ideographs of text in order."""
    return CJK_PATTERN.findall(text)


def _tone_from_pinyin(syllable: str) -> Tone:
    """Tone number from TONE3-style pinyin ("hao3" -> 3, "men" -> 0)."""
    match = re.search(r"([1-5])$", syllable)
    if not match:
        return 0
    tone = int(match.group(1))
    return cast(Tone, 0 if tone == 5 else tone)


class ToneDictionary:
    """Word/character to tone-sequence lookup.

    Usage:
        dictionary = ToneDictionary.load(Path("tones.json"))
        dictionary.tones_for("你好吗")  # [3, 3, 0]
    """

    def __init__(
        self,
        entries: Mapping[str, tuple[int, ...] | list[int] | int] | None = None,
        use_pypinyin: bool = False,
    ):
        self.entries: dict[str, tuple[Tone, ...]] = {}
        self.use_pypinyin = use_pypinyin
        for key, tones in (SAMPLE_TONES if entries is None else entries).items():
            self.add(key, tones)

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    @property
    def max_word_length(self) -> int:
        return max((len(k) for k in self.entries), default=1)

    def add(self, key: str, tones: tuple[int, ...] | list[int] | int) -> None:
        """Add or replace an entry.

        Raises:
            ToneDictionaryError: If the tone count does not match the
                number of characters or a tone is outside 0-4.
        """
        seq = (tones,) if isinstance(tones, int) else tuple(tones)
        if len(seq) != len(key):
            raise ToneDictionaryError(
                f"Entry {key!r} has {len(key)} characters but {len(seq)} tones"
            )
        if any(t not in (0, 1, 2, 3, 4) for t in seq):
            raise ToneDictionaryError(f"Entry {key!r} has tones outside 0-4: {seq}")
        self.entries[key] = cast(tuple[Tone, ...], seq)

    def lookup(self, character: str) -> Tone:
        """Tone of a single character."""
        if character in self.entries:
            return self.entries[character][0]
        if self.use_pypinyin:
            return self._pypinyin_tone(character)
        return DEFAULT_TONE

    def tones_for(self, text: str) -> list[Tone]:
        """Expected tone for every CJK character of text.

        Dictionary words are matched greedily, longest first.
        """
        chars = cjk_characters(text)
        tones: list[Tone] = []
        longest = self.max_word_length
        i = 0
        while i < len(chars):
            for size in range(min(longest, len(chars) - i), 1, -1):
                word = "".join(chars[i : i + size])
                if word in self.entries:
                    tones.extend(self.entries[word])
                    i += size
                    break
            else:
                tones.append(self.lookup(chars[i]))
                i += 1
        return tones

    def _pypinyin_tone(self, character: str) -> Tone:
        readings = pinyin(character, style=Style.TONE3, heteronym=False, neutral_tone_with_five=True)
        if not readings or not readings[0]:
            return DEFAULT_TONE
        syllable = readings[0][0]
        # pypinyin echoes characters it cannot romanize
        if syllable == character:
            return DEFAULT_TONE
        return _tone_from_pinyin(syllable)

    @classmethod
    def load(cls, path: Path, use_pypinyin: bool = False) -> ToneDictionary:
        """Load a dictionary from a JSON object of {word: tones}.

        Raises:
            ToneDictionaryError: If the file is unreadable or malformed.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ToneDictionaryError(f"Cannot read tone dictionary {path}: {e}") from e

        if not isinstance(data, dict):
            raise ToneDictionaryError(f"Tone dictionary {path} must be a JSON object")

        dictionary = cls(entries=data, use_pypinyin=use_pypinyin)
        logger.info("Loaded %d tone entries from %s", len(dictionary), path)
        return dictionary

    def to_json(self) -> str:
        return json.dumps(
            {k: list(v) for k, v in self.entries.items()},
            ensure_ascii=False,
            indent=2,
        )
