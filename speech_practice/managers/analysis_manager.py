# speech_practice/managers/analysis_manager.py - Transcription, metrics and coaching feedback

import logging
import re
from typing import Optional, Dict, Any, List

from openai import AsyncOpenAI

from speech_practice.agents.agent_configs import COACH_SYSTEM_PROMPT, build_feedback_prompt
from speech_practice.models.schemas import SpeechAnalysis, SpeechFeedback, SpeechMetrics
from speech_practice.utils.audio import AudioProcessor, AudioDecodeError
from speech_practice.utils.speech_metrics import analyze_metrics

logger = logging.getLogger(__name__)

MOCK_TRANSCRIPT = (
    "This is a mock transcript for development purposes. In production, this would be "
    "the actual transcribed speech from the user's recording."
)

DEFAULT_SUGGESTIONS = [
    "Practice speaking more slowly and clearly",
    "Try to reduce filler words like 'um' and 'like'",
    "Add more pauses between key points for emphasis",
]

LIST_MARKER = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

class SpeechAnalysisError(Exception):
    """The analysis pipeline failed"""

class SpeechAnalysisService:
    """Whisper transcription plus local metrics plus AI coaching feedback"""

    def __init__(self, settings, content_manager=None, audio_processor: AudioProcessor = None):
        self.settings = settings
        self.content_manager = content_manager
        self.audio = audio_processor or AudioProcessor()

        self.openai_client: Optional[AsyncOpenAI] = None
        if settings.openai_api_key:
            self.openai_client = AsyncOpenAI(api_key=settings.openai_api_key)

        self.openrouter_client: Optional[AsyncOpenAI] = None
        if settings.openrouter_api_key:
            self.openrouter_client = AsyncOpenAI(
                api_key=settings.openrouter_api_key,
                base_url=settings.openrouter_base_url,
            )

        logger.info(
            f"SpeechAnalysisService initialized (openai={'yes' if self.openai_client else 'no'}, "
            f"openrouter={'yes' if self.openrouter_client else 'no'})"
        )

    @property
    def feedback_provider(self) -> str:
        if self.openai_client:
            return "openai"
        if self.openrouter_client:
            return "openrouter"
        return "default"

    async def analyze_speech(self, audio_data: str, question_id: Optional[str], category_id: Optional[str],
                             duration_seconds: Optional[float] = None) -> SpeechAnalysis:
        """Decode, transcribe, measure and review one recording"""
        audio_bytes = self.audio.decode_base64_audio(audio_data)

        try:
            transcript = await self.transcribe_audio(audio_bytes)

            measured_duration = self.audio.wav_duration(audio_bytes)
            duration = measured_duration or duration_seconds
            silence = self.audio.estimate_silence_seconds(audio_bytes) if measured_duration else None

            metrics = analyze_metrics(transcript, duration_seconds=duration, silence_seconds=silence)
            feedback = await self.generate_feedback(transcript, metrics, question_id, category_id)

            return SpeechAnalysis(transcript=transcript, metrics=metrics, feedback=feedback)
        except AudioDecodeError:
            raise
        except Exception as e:
            logger.error(f"Error analyzing speech: {e}")
            raise SpeechAnalysisError("Failed to analyze speech") from e

    async def transcribe_audio(self, audio_bytes: bytes) -> str:
        """Transcribe with Whisper; the development transcript when unavailable"""
        if not self.openai_client:
            logger.warning("OpenAI is not configured, returning mock transcript")
            return MOCK_TRANSCRIPT

        try:
            transcription = await self.openai_client.audio.transcriptions.create(
                model=self.settings.openai_transcription_model,
                file=self.audio.upload_file_for(audio_bytes),
                response_format="text",
            )
            return (transcription if isinstance(transcription, str) else transcription.text).strip()
        except Exception as e:
            logger.error(f"Error transcribing audio with OpenAI: {e}")
            return MOCK_TRANSCRIPT

    async def generate_feedback(self, transcript: str, metrics: SpeechMetrics,
                                question_id: Optional[str], category_id: Optional[str]) -> SpeechFeedback:
        """Ask OpenAI, then OpenRouter, for coaching; default feedback if both fail"""
        try:
            question = None
            if self.content_manager:
                question = await self.content_manager.get_question(category_id, question_id)

            prompt = build_feedback_prompt(transcript, metrics, question_id, category_id, question)
        except Exception as e:
            logger.error(f"Error generating feedback: {e}")
            return self.default_feedback()

        if self.openai_client:
            try:
                response = await self._complete(self.openai_client, self.settings.openai_feedback_model, prompt)
                return self.parse_feedback_response(response)
            except Exception as e:
                logger.warning(f"OpenAI feedback failed, trying OpenRouter fallback: {e}")

        if not self.openrouter_client:
            logger.error("OpenAI feedback unavailable and no OpenRouter API key configured")
            return self.default_feedback()

        try:
            response = await self._complete(self.openrouter_client, self.settings.openrouter_model, prompt)
            return self.parse_feedback_response(response)
        except Exception as e:
            logger.error(f"OpenRouter fallback failed: {e}")
            return self.default_feedback()

    async def _complete(self, client: AsyncOpenAI, model: str, prompt: str) -> str:
        completion = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": COACH_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.settings.feedback_max_tokens,
            temperature=self.settings.feedback_temperature,
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    @staticmethod
    def parse_feedback_response(response: str) -> SpeechFeedback:
        """First non-blank line is the summary, the next three are suggestions"""
        lines = [line.strip() for line in (response or "").split("\n") if line.strip()]
        summary = lines[0] if lines else "Good effort! Here are some areas for improvement."

        suggestions: List[str] = []
        for line in lines[1:]:
            cleaned = LIST_MARKER.sub("", line).strip()
            if cleaned:
                suggestions.append(cleaned)
            if len(suggestions) == 3:
                break

        return SpeechFeedback(summary=summary, suggestions=suggestions or list(DEFAULT_SUGGESTIONS))

    @staticmethod
    def default_feedback() -> SpeechFeedback:
        return SpeechFeedback(
            summary="Good effort! Here are some general tips for improvement.",
            suggestions=list(DEFAULT_SUGGESTIONS),
        )

    def status(self) -> Dict[str, Any]:
        return {
            "transcription": "whisper" if self.openai_client else "mock",
            "feedback_provider": self.feedback_provider,
        }
