from .base import ASRClient, TTSClient
from .config import (
    AzureSpeechConfig,
    ElevenLabsConfig,
    GoogleSpeechConfig,
    OpenAISpeechConfig,
    SpeechProviderConfig,
)
from .connect import (
    SpeechProvider,
    asr_client,
    asr_client_for,
    get_asr_client,
    get_tts_client,
    synthesize,
    synthesize_with_env,
    transcribe,
    transcribe_with_env,
    tts_client,
    tts_client_for,
)
from .models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TranscriptionSegment,
    TTSSynthesisOptions,
)

__all__ = [
    "ASRClient",
    "ASRTranscriptionOptions",
    "AudioResponse",
    "AzureSpeechConfig",
    "ElevenLabsConfig",
    "GoogleSpeechConfig",
    "OpenAISpeechConfig",
    "SpeechProvider",
    "SpeechProviderConfig",
    "TTSClient",
    "TTSSynthesisOptions",
    "TranscriptionResponse",
    "TranscriptionSegment",
    "asr_client",
    "asr_client_for",
    "get_asr_client",
    "get_tts_client",
    "synthesize",
    "synthesize_with_env",
    "transcribe",
    "transcribe_with_env",
    "tts_client",
    "tts_client_for",
]
