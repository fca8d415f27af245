"""Speech capture and transcription for the press-to-talk screen."""

from voice_module.microphone import Microphone, UtteranceSegmenter
from voice_module.stt_whisper_local import WhisperLocalEngine
from voice_module.voice_listener import VoiceListener

__all__ = [
    "Microphone",
    "UtteranceSegmenter",
    "VoiceListener",
    "WhisperLocalEngine",
]
