"""Exceptions raised by shadowing_grader.

Analysis entry points never raise for empty or messy input; these are for
caller mistakes such as an unknown pitch method or an unreadable file.
"""


class ShadowingGraderError(Exception):
    """Base class for library errors."""


class UnknownMethodError(ShadowingGraderError, ValueError):
    """Requested algorithm variant does not exist."""


class ToneDictionaryError(ShadowingGraderError):
    """Tone dictionary file could not be read or parsed."""


class SessionStoreError(ShadowingGraderError):
    """Session log could not be loaded or saved."""


class EmotionRulesError(ShadowingGraderError, ValueError):
    """Emotion rule file is unreadable or references unknown features."""
