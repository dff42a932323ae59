"""
Tests for audio upload decoding and WAV measurements.
"""

import base64

import pytest

from speech_practice.utils.audio import AudioDecodeError


class TestDecodeBase64:

    def test_plain_base64(self, audio_processor):
        encoded = base64.b64encode(b"RIFF-data").decode()
        assert audio_processor.decode_base64_audio(encoded) == b"RIFF-data"

    def test_data_url_prefix(self, audio_processor):
        encoded = base64.b64encode(b"\x1a\x45\xdf\xa3webm").decode()
        data_url = f"data:audio/webm;codecs=opus;base64,{encoded}"
        assert audio_processor.decode_base64_audio(data_url) == b"\x1a\x45\xdf\xa3webm"

    def test_missing_padding_and_whitespace(self, audio_processor):
        encoded = base64.b64encode(b"abcd").decode().rstrip("=")
        assert audio_processor.decode_base64_audio(f" {encoded[:3]}\n{encoded[3:]} ") == b"abcd"

    @pytest.mark.parametrize("value", ["", "   ", "!!!not base64!!!"])
    def test_rejects_invalid(self, audio_processor, value):
        with pytest.raises(AudioDecodeError):
            audio_processor.decode_base64_audio(value)


class TestFormatDetection:

    @pytest.mark.parametrize("header,expected", [
        (b"RIFF\x00\x00\x00\x00WAVEfmt ", "wav"),
        (b"\x1a\x45\xdf\xa3\x00\x00\x00\x00", "webm"),
        (b"OggS\x00\x02\x00\x00", "ogg"),
        (b"fLaC\x00\x00\x00\x22", "flac"),
        (b"\x00\x00\x00\x20ftypM4A ", "mp4"),
        (b"ID3\x04\x00\x00\x00\x00", "mp3"),
        (b"plain text", None),
    ])
    def test_detect_format(self, audio_processor, header, expected):
        assert audio_processor.detect_format(header) == expected

    def test_upload_file_defaults_to_wav(self, audio_processor):
        filename, data, content_type = audio_processor.upload_file_for(b"unknown")
        assert filename == "audio.wav"
        assert data == b"unknown"
        assert content_type == "audio/wav"

    def test_upload_file_for_webm(self, audio_processor):
        filename, _, content_type = audio_processor.upload_file_for(b"\x1a\x45\xdf\xa3rest")
        assert filename == "audio.webm"
        assert content_type == "audio/webm"


class TestWavMeasurements:

    def test_wav_duration(self, audio_processor):
        wav = audio_processor.generate_tone_wav(duration=1.5, sample_rate=16000)
        assert audio_processor.wav_duration(wav) == pytest.approx(1.5)

    def test_wav_duration_none_for_other_formats(self, audio_processor):
        assert audio_processor.wav_duration(b"OggS" + b"\x00" * 40) is None

    def test_pcm_round_trip(self, audio_processor):
        pcm = b"\x01\x00\x02\x00" * 800
        frames, sample_rate, channels, sample_width = audio_processor.extract_pcm_from_wav(
            audio_processor.pcm_to_wav(pcm, sample_rate=8000)
        )
        assert frames == pcm
        assert (sample_rate, channels, sample_width) == (8000, 1, 2)

    def test_silence_estimate(self, audio_processor):
        wav = audio_processor.generate_tone_wav(duration=2.0, silence=1.0)
        assert audio_processor.estimate_silence_seconds(wav) == pytest.approx(1.0, abs=0.05)

    def test_continuous_tone_has_no_silence(self, audio_processor):
        wav = audio_processor.generate_tone_wav(duration=1.0)
        assert audio_processor.estimate_silence_seconds(wav) == 0.0

    def test_silence_none_for_non_wav(self, audio_processor):
        assert audio_processor.estimate_silence_seconds(b"ID3" + b"\x00" * 20) is None
