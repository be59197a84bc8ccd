"""
Speech client factories.

``get_tts_client`` and ``get_asr_client`` read ``SPEECH_MODEL`` (for example
``openai/tts-1`` or ``azure/en-US-JennyNeural``) and build the matching
adapter. The explicit path takes a provider config directly.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from ..dispatch import Capability, ProviderSpec, build_client, build_client_for_config, resolve_from_env
from ..result import Result
from .base import ASRClient, TTSClient
from .config import (
    AzureSpeechConfig,
    ElevenLabsConfig,
    GoogleSpeechConfig,
    OpenAISpeechConfig,
    SpeechProviderConfig,
)
from .models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TTSSynthesisOptions,
)
from .providers import AzureSpeechClient, ElevenLabsClient, GoogleSpeechClient, OpenAISpeechClient

SPEECH_MODEL_VARIABLE = "SPEECH_MODEL"
AMAZON_UNSUPPORTED = "Amazon Speech not yet implemented"


class SpeechProvider(str, Enum):
    OPENAI = "openai"
    AZURE = "azure"
    GOOGLE = "google"
    ELEVENLABS = "elevenlabs"
    AMAZON = "amazon"


TTS = Capability[TTSClient](
    name="speech synthesis",
    model_variable=SPEECH_MODEL_VARIABLE,
    specs=(
        ProviderSpec(SpeechProvider.OPENAI, "openai", OpenAISpeechConfig, OpenAISpeechClient),
        ProviderSpec(SpeechProvider.AZURE, "azure", AzureSpeechConfig, AzureSpeechClient),
        ProviderSpec(SpeechProvider.GOOGLE, "google", GoogleSpeechConfig, GoogleSpeechClient),
        ProviderSpec(SpeechProvider.ELEVENLABS, "elevenlabs", ElevenLabsConfig, ElevenLabsClient),
        ProviderSpec(SpeechProvider.AMAZON, None, None, None, AMAZON_UNSUPPORTED),
    ),
)

ASR = Capability[ASRClient](
    name="speech recognition",
    model_variable=SPEECH_MODEL_VARIABLE,
    specs=(
        ProviderSpec(SpeechProvider.OPENAI, "openai", OpenAISpeechConfig, OpenAISpeechClient),
        ProviderSpec(SpeechProvider.AZURE, "azure", AzureSpeechConfig, AzureSpeechClient),
        ProviderSpec(SpeechProvider.GOOGLE, "google", GoogleSpeechConfig, GoogleSpeechClient),
        ProviderSpec(
            SpeechProvider.ELEVENLABS,
            "elevenlabs",
            ElevenLabsConfig,
            None,
            "ElevenLabs does not support ASR",
        ),
        ProviderSpec(SpeechProvider.AMAZON, None, None, None, AMAZON_UNSUPPORTED),
    ),
)


def get_tts_client(env: Mapping[str, str] | None = None) -> TTSClient:
    """Build the TTS client named by ``SPEECH_MODEL``."""
    return resolve_from_env(TTS, env)


def get_asr_client(env: Mapping[str, str] | None = None) -> ASRClient:
    """Build the ASR client named by ``SPEECH_MODEL``."""
    return resolve_from_env(ASR, env)


def tts_client(provider: SpeechProvider, config: SpeechProviderConfig) -> TTSClient:
    return build_client(TTS, provider, config)


def asr_client(provider: SpeechProvider, config: SpeechProviderConfig) -> ASRClient:
    return build_client(ASR, provider, config)


def tts_client_for(config: SpeechProviderConfig) -> TTSClient:
    return build_client_for_config(TTS, config)


def asr_client_for(config: SpeechProviderConfig) -> ASRClient:
    return build_client_for_config(ASR, config)


def synthesize(
    text: str,
    provider: SpeechProvider,
    config: SpeechProviderConfig,
    options: TTSSynthesisOptions | None = None,
) -> Result[AudioResponse]:
    return tts_client(provider, config).synthesize(text, options)


def transcribe(
    audio_data: bytes,
    provider: SpeechProvider,
    config: SpeechProviderConfig,
    options: ASRTranscriptionOptions | None = None,
) -> Result[TranscriptionResponse]:
    return asr_client(provider, config).transcribe(audio_data, options)


def synthesize_with_env(
    text: str,
    options: TTSSynthesisOptions | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[AudioResponse]:
    return get_tts_client(env).synthesize(text, options)


def transcribe_with_env(
    audio_data: bytes,
    options: ASRTranscriptionOptions | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[TranscriptionResponse]:
    return get_asr_client(env).transcribe(audio_data, options)
