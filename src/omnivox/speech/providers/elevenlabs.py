"""
ElevenLabs text-to-speech client.

ElevenLabs only offers synthesis; resolving it for recognition is rejected
during provider resolution.
"""

from __future__ import annotations

import logging
from typing import Mapping

import requests

from ...result import Err, Result, ValidationError
from ...transport import HttpTransport
from ..base import TTSClient, reject_blank_text, word_count
from ..config import ElevenLabsConfig
from ..models import AudioResponse, TTSSynthesisOptions

logger = logging.getLogger(__name__)

DEFAULT_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
OUTPUT_FORMATS = {
    "mp3": "mp3_44100_128",
    "pcm": "pcm_16000",
    "opus": "opus_48000_64",
}
PCM_SAMPLE_RATE = 16_000


class ElevenLabsClient(TTSClient):
    def __init__(
        self,
        config: ElevenLabsConfig,
        *,
        session: requests.Session | None = None,
        voice_settings: Mapping[str, object] | None = None,
    ) -> None:
        self.config = config
        self.voice_settings = dict(
            voice_settings
            or {
                "stability": 0.5,
                "similarity_boost": 0.5,
                "style": 0.0,
                "use_speaker_boost": True,
            }
        )
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"xi-api-key": config.api_key},
        )

    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        rejected = reject_blank_text(text)
        if rejected is not None:
            return rejected

        voice_id, model_id = self._resolve_voice_and_model(options)
        fmt = options.response_format if options else "mp3"
        output_format = OUTPUT_FORMATS.get(fmt)
        if output_format is None:
            return Err(ValidationError(f"Unsupported ElevenLabs output format: {fmt}"))

        payload = self._build_payload(text, model_id, options)
        return self._transport.post(
            f"{self.config.base_url}/text-to-speech/{voice_id}",
            params={"output_format": output_format},
            json=payload,
            headers={"Accept": "application/octet-stream"},
        ).map(
            lambda response: AudioResponse(
                audio_data=response.content,
                format=fmt,
                duration=(len(response.content) // 2) / PCM_SAMPLE_RATE if fmt == "pcm" else None,
                word_count=word_count(text),
            )
        )

    def close(self) -> None:
        self._transport.close()

    # ------------------------------------------------------------------ #
    # Helpers

    def _resolve_voice_and_model(self, options: TTSSynthesisOptions | None) -> tuple[str, str]:
        if options is None:
            return DEFAULT_VOICE_ID, self.config.model
        return options.voice or DEFAULT_VOICE_ID, options.model or self.config.model

    def _build_payload(
        self, text: str, model_id: str, options: TTSSynthesisOptions | None
    ) -> dict[str, object]:
        voice_settings = dict(self.voice_settings)
        if options is not None and options.speed != 1.0:
            voice_settings["speed"] = float(options.speed)
        payload: dict[str, object] = {
            "text": text,
            "model_id": model_id,
            "voice_settings": voice_settings,
        }
        if options is not None and options.language:
            payload["language_code"] = options.language
        return payload
