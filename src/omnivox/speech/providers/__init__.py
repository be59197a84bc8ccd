from .azure import AzureSpeechClient
from .elevenlabs import ElevenLabsClient
from .google import GoogleSpeechClient
from .openai import OpenAISpeechClient

__all__ = [
    "AzureSpeechClient",
    "ElevenLabsClient",
    "GoogleSpeechClient",
    "OpenAISpeechClient",
]
