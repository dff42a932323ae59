from typing import Dict, Any, Optional
import logging

from speech_practice.models.schemas import SpeechMetrics
from speech_practice.utils.speech_metrics import round_half_up

logger = logging.getLogger(__name__)

COACH_SYSTEM_PROMPT = (
    "You are an expert speech coach providing constructive feedback. "
    "Be encouraging but honest. Focus on actionable advice."
)

def build_feedback_prompt(transcript: str, metrics: SpeechMetrics,
                          question_id: Optional[str], category_id: Optional[str],
                          question: Optional[Dict[str, Any]] = None) -> str:
    """User prompt asking the coach model to review one practice answer"""
    question_lines = f"Question Category: {category_id or 'general'}\nQuestion ID: {question_id or 'free-practice'}"
    if question:
        question_lines += f"\nQuestion: {question.get('question', '')}"
        if question.get('tips'):
            question_lines += f"\nCoaching tip for this question: {question['tips']}"

    return f"""You are an expert speech coach analyzing a practice response.

{question_lines}

Transcript: "{transcript}"

Metrics:
- Filler words: {metrics.filler_words}
- Speech rate: {metrics.speech_rate} words per minute
- Pause duration: {metrics.pause_duration} seconds
- Confidence score: {int(round_half_up(metrics.confidence * 100))}%

Please provide:
1. A brief summary (2-3 sentences) of the overall performance
2. 3 specific, actionable suggestions for improvement

Focus on practical advice that can be implemented immediately. Be encouraging but honest about areas for improvement."""

def get_conversation_agent_config(topic: Dict[str, Any], user_info: Dict[str, Any] = None) -> Dict[str, Any]:
    """Configuration handed to the LiveKit voice agent for a conversation topic"""

    logger.info(f"Creating conversation agent config for topic: {topic.get('title', 'Unknown')}")

    user_name = user_info.get('name', 'there') if user_info else 'there'
    difficulty = topic.get('difficulty', 'intermediate')

    instructions = f"""{topic.get('prompt', 'You are a friendly conversation partner.')}

You are helping {user_name} practice speaking out loud. The session difficulty is {difficulty}.

Guidelines:
- Keep each of your turns short (one to three sentences) so the user does most of the talking.
- Ask open questions and react naturally to what the user says.
- Do not correct every mistake while they speak; if they pause for a long time, gently prompt them.
- When the user asks for feedback, comment on clarity, pacing, filler words and confidence."""

    config = {
        "name": "conversation_agent",
        "topic_id": topic.get('id'),
        "topic_title": topic.get('title'),
        "instructions": instructions,
        "greeting": topic.get('openingLine', "Hi! What would you like to talk about today?"),
        "voice": "alloy",
    }

    logger.info(f"Conversation agent config created for {user_name} ({difficulty})")
    return config
