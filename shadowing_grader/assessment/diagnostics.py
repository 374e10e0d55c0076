"""Word-level error analysis, score grades and feedback text."""

from typing import Literal

from .models import ErrorCategory, Severity, WordDiagnostic, WordScore

Grade = Literal["excellent", "good", "fair", "weak", "poor"]

# Checked in order; the first problem phoneme found decides the diagnosis.
PHONEME_RULES: list[tuple[frozenset[str], ErrorCategory, Severity, str, str]] = [
    (
        frozenset({"zh", "ch", "sh"}),
        "consonant",
        "high",
        "Retroflex initial produced as a flat z/c/s. Curl the tongue tip back.",
        "Repeat zhōng guó slowly five times.",
    ),
    (
        frozenset({"ü", "v"}),
        "vowel",
        "high",
        "ü merged with u. Round the lips while keeping the tongue forward.",
        "Alternate lǜ and nǚ.",
    ),
    (
        frozenset({"r"}),
        "consonant",
        "medium",
        "Weak r or r replaced by l. Keep the tongue tip off the palate.",
        "Repeat rén and rì.",
    ),
]

GRADE_BANDS: list[tuple[float, Grade]] = [
    (90, "excellent"),
    (80, "good"),
    (70, "fair"),
    (60, "weak"),
]

SCORE_TIER_ADVICE: list[tuple[float, str]] = [
    (90, "Close to native level. Broaden practice to new topics."),
    (80, "Very good pronunciation. Polish tones and intonation to finish."),
    (70, "Good pronunciation with a few gaps. Practice telling tones and phonemes apart."),
    (60, "The basics are in place but need more practice. Drill tones and core phonemes."),
    (40, "Pronunciation needs substantial work. Build up tones and core phonemes step by step."),
    (0, "Start again from the fundamentals of tones and core phonemes."),
]


def score_grade(score: float) -> Grade:
    """Grade band for a 0-100 score."""
    for floor, grade in GRADE_BANDS:
        if score >= floor:
            return grade
    return "poor"


def score_tier_advice(average_score: float) -> str:
    """Overall advice message for an average score."""
    for floor, message in SCORE_TIER_ADVICE:
        if average_score >= floor:
            return message
    return SCORE_TIER_ADVICE[-1][1]


def diagnose_word(
    word: WordScore,
    phoneme_threshold: float = 70.0,
    tone_threshold: float = 60.0,
) -> WordDiagnostic:
    """Classify the dominant problem of a word.

    Known difficult phonemes come first, then a low-scoring
    mispronunciation is treated as a tone failure, then breaks and
    omissions as rhythm problems, then any remaining weak phonemes.
    """
    problems = [p.phoneme for p in word.phonemes if p.accuracy_score < phoneme_threshold]

    for phonemes, category, severity, hint, practice in PHONEME_RULES:
        hit = [p for p in problems if p in phonemes]
        if hit:
            return WordDiagnostic(
                word=word.text,
                error_type=word.error_type,
                problematic_phonemes=hit[:1],
                category=category,
                severity=severity,
                hint=hint,
                practice=practice,
            )

    if word.error_type == "Mispronunciation" and word.accuracy_score < tone_threshold:
        return WordDiagnostic(
            word=word.text,
            error_type=word.error_type,
            category="tone",
            severity="high",
            hint="Tone not distinguished. Trace the pitch curve with your hand while speaking.",
            practice="Say each of the four tones five times: level, rising, dipping, falling.",
        )

    if word.error_type in ("UnexpectedBreak", "Omission"):
        return WordDiagnostic(
            word=word.text,
            error_type=word.error_type,
            problematic_phonemes=problems,
            category="rhythm",
            severity="medium",
            hint="Broken or skipped word. Shadow the phrase as one breath group.",
            practice=f"Repeat the phrase containing {word.text} without stopping.",
        )

    if problems:
        return WordDiagnostic(
            word=word.text,
            error_type=word.error_type,
            problematic_phonemes=problems,
            category="consonant",
            severity="medium",
            hint="Some phonemes are not yet accurate. Repeat them slowly.",
            practice=f"Say {', '.join(problems)} ten times.",
        )

    return WordDiagnostic(word=word.text, error_type=word.error_type)
