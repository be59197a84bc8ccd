"""
Per-provider speech configuration.

``from_env`` returns ``Err(MissingVariableError)`` when a required variable
is absent and leaves the decision to fail to the caller
(``omnivox.env.expect_config``).
"""

from __future__ import annotations

from dataclasses import dataclass

from ..env import DEFAULT_TIMEOUT_SECONDS, EnvSource
from ..result import Ok, Result

OPENAI_BASE_URL = "https://api.openai.com/v1"
AZURE_SPEECH_BASE_URL = "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"
AZURE_STT_BASE_URL = "https://{region}.stt.speech.microsoft.com"
GOOGLE_SPEECH_BASE_URL = "https://texttospeech.googleapis.com/v1"
GOOGLE_STT_BASE_URL = "https://speech.googleapis.com/v1"
ELEVENLABS_BASE_URL = "https://api.elevenlabs.io/v1"


def _hint(prefix: str) -> str:
    return f"required when using {prefix}/ model."


@dataclass(frozen=True)
class OpenAISpeechConfig:
    api_key: str
    model: str = "tts-1"
    base_url: str = OPENAI_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["OpenAISpeechConfig"]:
        return env.require("OPENAI_API_KEY", _hint("openai")).bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name,
                    base_url=env.get_or("OPENAI_BASE_URL", OPENAI_BASE_URL),
                    timeout=env.timeout_seconds(),
                )
            )
        )


@dataclass(frozen=True)
class AzureSpeechConfig:
    api_key: str
    region: str
    model: str = "en-US-JennyNeural"
    base_url: str = AZURE_SPEECH_BASE_URL
    stt_base_url: str = AZURE_STT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def tts_endpoint(self) -> str:
        return self.base_url.format(region=self.region)

    @property
    def stt_endpoint(self) -> str:
        return self.stt_base_url.format(region=self.region)

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["AzureSpeechConfig"]:
        return env.require("AZURE_SPEECH_API_KEY", _hint("azure")).bind(
            lambda api_key: env.require("AZURE_SPEECH_REGION", _hint("azure")).bind(
                lambda region: Ok(
                    cls(
                        api_key=api_key,
                        region=region,
                        model=model_name,
                        base_url=env.get_or("AZURE_SPEECH_BASE_URL", AZURE_SPEECH_BASE_URL),
                        stt_base_url=env.get_or("AZURE_STT_BASE_URL", AZURE_STT_BASE_URL),
                        timeout=env.timeout_seconds(),
                    )
                )
            )
        )


@dataclass(frozen=True)
class GoogleSpeechConfig:
    api_key: str
    model: str = "latest"
    base_url: str = GOOGLE_SPEECH_BASE_URL
    stt_base_url: str = GOOGLE_STT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["GoogleSpeechConfig"]:
        return env.require("GOOGLE_SPEECH_API_KEY", _hint("google")).bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name,
                    base_url=env.get_or("GOOGLE_SPEECH_BASE_URL", GOOGLE_SPEECH_BASE_URL),
                    stt_base_url=env.get_or("GOOGLE_STT_BASE_URL", GOOGLE_STT_BASE_URL),
                    timeout=env.timeout_seconds(),
                )
            )
        )


@dataclass(frozen=True)
class ElevenLabsConfig:
    api_key: str
    model: str = "eleven_monolingual_v1"
    base_url: str = ELEVENLABS_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["ElevenLabsConfig"]:
        return env.require("ELEVENLABS_API_KEY", _hint("elevenlabs")).bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name,
                    base_url=env.get_or("ELEVENLABS_BASE_URL", ELEVENLABS_BASE_URL),
                    timeout=env.timeout_seconds(),
                )
            )
        )


SpeechProviderConfig = OpenAISpeechConfig | AzureSpeechConfig | GoogleSpeechConfig | ElevenLabsConfig
