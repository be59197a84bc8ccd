"""
Speech engines that run as local command-line tools instead of HTTP services.
"""

from .tacotron2_cli import Tacotron2TextToSpeech
from .whisper_cli import WhisperSpeechToText

__all__ = ["Tacotron2TextToSpeech", "WhisperSpeechToText"]
