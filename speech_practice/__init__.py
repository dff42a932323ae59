"""
Speech Practice Service

Backend for a browser-based speech-practice app: Whisper transcription,
heuristic delivery metrics, AI coaching feedback and LiveKit conversation rooms.
"""

__version__ = "1.0.0"
