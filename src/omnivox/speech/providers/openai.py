"""
OpenAI speech client: ``/audio/speech`` for synthesis and
``/audio/transcriptions`` for recognition.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from ...result import Err, Ok, Result, UnknownError
from ...transport import HttpTransport
from ..base import ASRClient, TTSClient, reject_blank_text, reject_empty_audio, sniff_container, word_count
from ..config import OpenAISpeechConfig
from ..models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TTSSynthesisOptions,
    parse_segments,
)

logger = logging.getLogger(__name__)

_MIME_TYPES = {
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "pcm": "application/octet-stream",
}

DEFAULT_VOICE = "alloy"
DEFAULT_TTS_MODEL = "tts-1"
DEFAULT_ASR_MODEL = "whisper-1"


class OpenAISpeechClient(TTSClient, ASRClient):
    def __init__(
        self,
        config: OpenAISpeechConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"Authorization": f"Bearer {config.api_key}"},
        )

    @property
    def tts_model(self) -> str:
        """The configured model, unless ``SPEECH_MODEL`` names a transcription model."""
        model = self.config.model
        return DEFAULT_TTS_MODEL if not model or _is_transcription_model(model) else model

    @property
    def asr_model(self) -> str:
        model = self.config.model
        return model if model and _is_transcription_model(model) else DEFAULT_ASR_MODEL

    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        rejected = reject_blank_text(text)
        if rejected is not None:
            return rejected

        opts = options or TTSSynthesisOptions()
        payload = {
            "model": opts.model or self.tts_model,
            "input": text,
            "voice": opts.voice or DEFAULT_VOICE,
            "response_format": opts.response_format,
            "speed": opts.speed,
        }
        return self._transport.post(f"{self.config.base_url}/audio/speech", json=payload).map(
            lambda response: AudioResponse(
                audio_data=response.content,
                format=opts.response_format,
                word_count=word_count(text),
            )
        )

    def transcribe(
        self, audio_data: bytes, options: ASRTranscriptionOptions | None = None
    ) -> Result[TranscriptionResponse]:
        rejected = reject_empty_audio(audio_data)
        if rejected is not None:
            return rejected

        opts = options or ASRTranscriptionOptions()
        container = sniff_container(audio_data)
        form: dict[str, Any] = {
            "model": opts.model or self.asr_model,
            "response_format": opts.response_format,
            "temperature": str(opts.temperature),
        }
        if opts.language:
            form["language"] = opts.language
        if opts.prompt:
            form["prompt"] = opts.prompt
        if opts.response_format == "verbose_json" and opts.timestamp_granularities:
            form["timestamp_granularities[]"] = list(opts.timestamp_granularities)

        files = {"file": (f"audio.{container}", audio_data, _MIME_TYPES[container])}
        return self._transport.post(
            f"{self.config.base_url}/audio/transcriptions", data=form, files=files
        ).bind(lambda response: _parse_transcription(response, opts))

    def close(self) -> None:
        self._transport.close()


def _parse_transcription(
    response: requests.Response, options: ASRTranscriptionOptions
) -> Result[TranscriptionResponse]:
    if options.response_format in ("text", "srt", "vtt"):
        return Ok(TranscriptionResponse(text=response.text.strip(), language=options.language))

    try:
        body = response.json()
        segments = parse_segments(body.get("segments"))
        return Ok(
            TranscriptionResponse(
                text=str(body["text"]).strip(),
                language=body.get("language") or options.language,
                duration=body.get("duration"),
                segments=segments,
            )
        )
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("Unexpected OpenAI transcription payload: %s", exc)
        return Err(UnknownError(exc))


def _is_transcription_model(model: str) -> bool:
    return "whisper" in model or "transcribe" in model
