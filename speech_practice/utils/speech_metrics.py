# speech_practice/utils/speech_metrics.py - Heuristic delivery metrics from a transcript

import math
import re
from typing import Optional

from speech_practice.models.schemas import SpeechMetrics

FILLER_WORDS = [
    'um', 'uh', 'like', 'you know', 'i mean', 'basically', 'actually', 'literally',
    'sort of', 'kind of', 'right', 'okay', 'so', 'well', 'hmm', 'ah'
]

DEFAULT_WINDOW_SECONDS = 60.0
SECONDS_PER_WORD = 0.5

def _filler_pattern(filler: str) -> re.Pattern:
    words = [re.escape(word) for word in filler.split()]
    return re.compile(r"\b" + r"\s+".join(words) + r"\b", re.IGNORECASE)

FILLER_PATTERNS = [_filler_pattern(filler) for filler in FILLER_WORDS]

def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positive values, unlike round()"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor

def count_words(transcript: str) -> int:
    return len(transcript.split())

def count_filler_words(transcript: str) -> int:
    """Whole-word, case-insensitive matches of every filler"""
    return sum(len(pattern.findall(transcript)) for pattern in FILLER_PATTERNS)

def analyze_metrics(transcript: str,
                    duration_seconds: Optional[float] = None,
                    silence_seconds: Optional[float] = None) -> SpeechMetrics:
    """Estimate filler count, speaking rate, pauses and a confidence score.

    Without a known recording length the transcript is assumed to cover 60
    seconds and pauses are inferred from how few words were spoken.
    """
    transcript = transcript or ""
    word_count = count_words(transcript)
    filler_count = count_filler_words(transcript)

    window = duration_seconds if duration_seconds and duration_seconds > 0 else DEFAULT_WINDOW_SECONDS

    speech_rate = int(round_half_up(word_count * 60 / window))

    if silence_seconds is not None:
        pause_duration = max(0.0, min(silence_seconds, window))
    else:
        pause_duration = max(0.0, window - word_count * SECONDS_PER_WORD)

    confidence = 1 - (filler_count / max(word_count, 1)) * 0.5 - (pause_duration / window) * 0.3
    confidence = max(0.0, min(1.0, confidence))

    return SpeechMetrics(
        filler_words=filler_count,
        speech_rate=speech_rate,
        pause_duration=round_half_up(pause_duration, 1),
        confidence=round_half_up(confidence, 2),
    )
