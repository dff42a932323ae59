# speech_practice/utils/audio.py - Audio upload utilities

import base64
import binascii
import io
import logging
import re
import struct
import wave
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:[^;,]*(;[^,]*)?,", re.IGNORECASE)

FORMAT_FILES = {
    "wav": ("audio.wav", "audio/wav"),
    "webm": ("audio.webm", "audio/webm"),
    "ogg": ("audio.ogg", "audio/ogg"),
    "mp3": ("audio.mp3", "audio/mpeg"),
    "mp4": ("audio.m4a", "audio/mp4"),
    "flac": ("audio.flac", "audio/flac"),
}

class AudioDecodeError(ValueError):
    """Uploaded audio could not be decoded"""

class AudioProcessor:
    """Decoding and measurement of uploaded recordings"""

    def __init__(self, silence_threshold: float = 0.02, frame_ms: int = 30):
        self.sample_width = 2  # 16-bit audio
        self.channels = 1      # Mono audio
        self.silence_threshold = silence_threshold
        self.frame_ms = frame_ms

    def decode_base64_audio(self, audio_data: str) -> bytes:
        """Decode a base64 string or data URL into raw bytes"""
        if not audio_data or not audio_data.strip():
            raise AudioDecodeError("Audio data is empty")

        payload = DATA_URL_PATTERN.sub("", audio_data.strip(), count=1)
        payload = "".join(payload.split())
        payload += "=" * (-len(payload) % 4)

        try:
            decoded = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AudioDecodeError(f"Audio data is not valid base64: {e}") from e

        if not decoded:
            raise AudioDecodeError("Audio data is empty")
        return decoded

    def detect_format(self, audio_bytes: bytes) -> Optional[str]:
        """Identify the container from magic bytes"""
        header = audio_bytes[:12]
        if header[:4] == b"RIFF" and header[8:12] == b"WAVE":
            return "wav"
        if header[:4] == b"\x1a\x45\xdf\xa3":
            return "webm"
        if header[:4] == b"OggS":
            return "ogg"
        if header[:4] == b"fLaC":
            return "flac"
        if header[4:8] == b"ftyp":
            return "mp4"
        if header[:3] == b"ID3" or (len(header) >= 2 and header[0] == 0xFF and (header[1] & 0xE0) == 0xE0):
            return "mp3"
        return None

    def upload_file_for(self, audio_bytes: bytes) -> Tuple[str, bytes, str]:
        """(filename, bytes, content type) tuple for a multipart upload"""
        filename, content_type = FORMAT_FILES.get(self.detect_format(audio_bytes), FORMAT_FILES["wav"])
        return filename, audio_bytes, content_type

    def create_wav_header(self, sample_rate: int, num_samples: int, num_channels: int = 1, sample_width: int = 2) -> bytes:
        """Create WAV file header"""
        byte_rate = sample_rate * num_channels * sample_width
        block_align = num_channels * sample_width
        data_size = num_samples * num_channels * sample_width
        file_size = data_size + 36

        return struct.pack(
            '<4sI4s4sIHHIIHH4sI',
            b'RIFF',
            file_size,
            b'WAVE',
            b'fmt ',
            16,                # Subchunk1 size
            1,                 # Audio format (PCM)
            num_channels,
            sample_rate,
            byte_rate,
            block_align,
            sample_width * 8,  # Bits per sample
            b'data',
            data_size
        )

    def pcm_to_wav(self, pcm_data: bytes, sample_rate: int = 16000) -> bytes:
        """Convert raw mono PCM16 data to WAV format"""
        num_samples = len(pcm_data) // 2
        return self.create_wav_header(sample_rate, num_samples) + pcm_data

    def extract_pcm_from_wav(self, wav_data: bytes) -> Tuple[bytes, int, int, int]:
        """PCM frames, sample rate, channels and sample width of a WAV file"""
        try:
            with wave.open(io.BytesIO(wav_data), 'rb') as wav_file:
                sample_rate = wav_file.getframerate()
                channels = wav_file.getnchannels()
                sample_width = wav_file.getsampwidth()
                frames = wav_file.readframes(wav_file.getnframes())

                logger.debug(f"Extracted WAV: {sample_rate}Hz, {channels}ch, {sample_width*8}bit")
                return frames, sample_rate, channels, sample_width
        except (wave.Error, EOFError) as e:
            logger.debug(f"Not a readable PCM WAV: {e}")
            return b'', 0, 0, 0

    def wav_duration(self, audio_bytes: bytes) -> Optional[float]:
        """Duration in seconds, or None when the audio is not a PCM WAV"""
        if self.detect_format(audio_bytes) != "wav":
            return None
        frames, sample_rate, channels, sample_width = self.extract_pcm_from_wav(audio_bytes)
        if not sample_rate or not channels or not sample_width:
            return None
        return len(frames) / float(sample_rate * channels * sample_width)

    def estimate_silence_seconds(self, audio_bytes: bytes) -> Optional[float]:
        """Total length of low-energy frames in a PCM16 WAV"""
        if self.detect_format(audio_bytes) != "wav":
            return None

        frames, sample_rate, channels, sample_width = self.extract_pcm_from_wav(audio_bytes)
        if sample_width != 2 or not sample_rate or not frames:
            return None

        samples = np.frombuffer(frames, dtype=np.int16).astype(np.float32) / 32768.0
        if channels > 1:
            usable = len(samples) - len(samples) % channels
            samples = samples[:usable].reshape(-1, channels).mean(axis=1)

        frame_size = max(1, int(sample_rate * self.frame_ms / 1000))
        num_frames = len(samples) // frame_size
        if num_frames == 0:
            return None

        framed = samples[:num_frames * frame_size].reshape(num_frames, frame_size)
        rms = np.sqrt(np.mean(framed ** 2, axis=1))
        quiet_frames = int(np.count_nonzero(rms < self.silence_threshold))

        return quiet_frames * frame_size / float(sample_rate)

    def generate_tone_wav(self, frequency: float = 440.0, duration: float = 2.0,
                          sample_rate: int = 16000, silence: float = 0.0) -> bytes:
        """Sine-wave PCM16 WAV, optionally followed by silence"""
        samples = int(sample_rate * duration)
        t = np.linspace(0, duration, samples, False)
        tone = (np.sin(frequency * 2 * np.pi * t) * 0.5 * 32767).astype(np.int16)
        gap = np.zeros(int(sample_rate * silence), dtype=np.int16)
        return self.pcm_to_wav(np.concatenate([tone, gap]).tobytes(), sample_rate)
