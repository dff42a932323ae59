"""
Tests for transcript-based delivery metrics.
"""

from speech_practice.managers.analysis_manager import MOCK_TRANSCRIPT
from speech_practice.utils.speech_metrics import (
    analyze_metrics, count_filler_words, count_words, round_half_up
)


class TestRounding:

    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round(2.5) == 2  # banker's rounding, which the metrics avoid

    def test_digits(self):
        assert round_half_up(0.7525, 2) == 0.75
        assert round_half_up(1.25, 1) == 1.3


class TestFillerWords:

    def test_counts_single_word_fillers(self):
        assert count_filler_words("Um, I think, uh, it went well") == 3  # um, uh, well

    def test_case_insensitive(self):
        assert count_filler_words("UM so LIKE") == 3

    def test_whole_words_only(self):
        assert count_filler_words("The umbrella was likely soaked") == 0

    def test_multi_word_fillers(self):
        assert count_filler_words("You know, I mean it was sort of fine") == 3

    def test_multi_word_across_whitespace(self):
        assert count_filler_words("you\n  know") == 1


class TestAnalyzeMetrics:

    def test_development_transcript(self):
        metrics = analyze_metrics(MOCK_TRANSCRIPT)

        assert count_words(MOCK_TRANSCRIPT) == 21
        assert metrics.filler_words == 0
        assert metrics.speech_rate == 21
        assert metrics.pause_duration == 49.5
        assert metrics.confidence == 0.75

    def test_fillers_lower_confidence(self):
        clean = analyze_metrics("I delivered the project on time and under budget")
        filler = analyze_metrics("Um I basically delivered the project on time like")
        assert filler.filler_words == 3
        assert filler.confidence < clean.confidence

    def test_empty_transcript(self):
        metrics = analyze_metrics("")

        assert metrics.filler_words == 0
        assert metrics.speech_rate == 0
        assert metrics.pause_duration == 60.0
        assert metrics.confidence == 0.7

    def test_long_transcript_has_no_pauses(self):
        metrics = analyze_metrics(" ".join(["word"] * 150))

        assert metrics.speech_rate == 150
        assert metrics.pause_duration == 0.0
        assert metrics.confidence == 1.0

    def test_known_duration_scales_rate(self):
        metrics = analyze_metrics(" ".join(["word"] * 30), duration_seconds=15)

        assert metrics.speech_rate == 120
        assert metrics.pause_duration == 0.0

    def test_measured_silence_replaces_estimate(self):
        metrics = analyze_metrics(" ".join(["word"] * 20), duration_seconds=20, silence_seconds=5)

        assert metrics.pause_duration == 5.0
        assert metrics.confidence == round_half_up(1 - (5 / 20) * 0.3, 2)

    def test_silence_clamped_to_window(self):
        metrics = analyze_metrics("hello", duration_seconds=10, silence_seconds=25)
        assert metrics.pause_duration == 10.0

    def test_confidence_never_negative(self):
        metrics = analyze_metrics("um uh um uh")
        assert 0.0 <= metrics.confidence <= 1.0
