"""
Google Cloud speech client (Text-to-Speech and Speech-to-Text v1 REST APIs).
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

import requests

from ...result import Err, Ok, Result, UnknownError, ValidationError
from ...transport import HttpTransport
from ..base import ASRClient, TTSClient, reject_blank_text, reject_empty_audio, sniff_container, word_count
from ..config import GoogleSpeechConfig
from ..models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TranscriptionSegment,
    TTSSynthesisOptions,
)

logger = logging.getLogger(__name__)

AUDIO_ENCODINGS = {
    "mp3": "MP3",
    "wav": "LINEAR16",
    "pcm": "LINEAR16",
    "opus": "OGG_OPUS",
}
RECOGNITION_ENCODINGS = {
    "wav": "LINEAR16",
    "pcm": "LINEAR16",
    "mp3": "MP3",
    "ogg": "OGG_OPUS",
    "flac": "FLAC",
}
DEFAULT_LANGUAGE = "en-US"


def _seconds(value: Any) -> float:
    """Parse Google duration strings such as ``"1.500s"``."""
    if value is None:
        return 0.0
    return float(str(value).rstrip("s") or 0.0)


class GoogleSpeechClient(TTSClient, ASRClient):
    def __init__(
        self,
        config: GoogleSpeechConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"X-Goog-Api-Key": config.api_key},
        )

    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        rejected = reject_blank_text(text)
        if rejected is not None:
            return rejected

        opts = options or TTSSynthesisOptions()
        encoding = AUDIO_ENCODINGS.get(opts.response_format)
        if encoding is None:
            return Err(ValidationError(f"Unsupported Google audio encoding: {opts.response_format}"))

        voice: dict[str, Any] = {
            "languageCode": opts.language or DEFAULT_LANGUAGE,
            "ssmlGender": "NEUTRAL",
        }
        if opts.voice:
            voice["name"] = opts.voice
        payload = {
            "input": {"text": text},
            "voice": voice,
            "audioConfig": {
                "audioEncoding": encoding,
                "speakingRate": opts.speed,
                "pitch": 0.0,
                "volumeGainDb": 0.0,
            },
        }
        return self._transport.post(f"{self.config.base_url}/text:synthesize", json=payload).bind(
            lambda response: _decode_audio(response, opts.response_format, text)
        )

    def transcribe(
        self, audio_data: bytes, options: ASRTranscriptionOptions | None = None
    ) -> Result[TranscriptionResponse]:
        rejected = reject_empty_audio(audio_data)
        if rejected is not None:
            return rejected

        opts = options or ASRTranscriptionOptions()
        container = sniff_container(audio_data)
        recognition_config: dict[str, Any] = {
            "encoding": RECOGNITION_ENCODINGS[container],
            "languageCode": opts.language or DEFAULT_LANGUAGE,
            "model": opts.model or self.config.model,
            "enableWordTimeOffsets": "word" in opts.timestamp_granularities,
            "enableAutomaticPunctuation": True,
        }
        if container == "pcm":
            recognition_config["sampleRateHertz"] = 16_000
        payload = {
            "config": recognition_config,
            "audio": {"content": base64.b64encode(audio_data).decode("ascii")},
        }
        return self._transport.post(f"{self.config.stt_base_url}/speech:recognize", json=payload).bind(
            lambda response: _parse_recognition(response, opts)
        )

    def close(self) -> None:
        self._transport.close()


def _decode_audio(response: requests.Response, fmt: str, text: str) -> Result[AudioResponse]:
    try:
        audio = base64.b64decode(response.json()["audioContent"])
    except (ValueError, KeyError, TypeError, binascii.Error) as exc:
        logger.warning("Unexpected Google synthesis payload: %s", exc)
        return Err(UnknownError(exc))
    return Ok(AudioResponse(audio_data=audio, format=fmt, word_count=word_count(text)))


def _parse_recognition(
    response: requests.Response, options: ASRTranscriptionOptions
) -> Result[TranscriptionResponse]:
    try:
        results = response.json().get("results") or []
        if not results:
            return Err(ValidationError("No transcription results found"))
        alternatives = results[0].get("alternatives") or []
        if not alternatives:
            return Err(ValidationError("No transcription alternatives found"))

        best = alternatives[0]
        text = str(best.get("transcript", "")).strip()
        words = best.get("words") or []
        start = _seconds(words[0].get("startTime")) if words else 0.0
        end = _seconds(words[-1].get("endTime")) if words else 0.0
        language = results[0].get("languageCode") or options.language
    except (ValueError, TypeError, AttributeError) as exc:
        logger.warning("Unexpected Google recognition payload: %s", exc)
        return Err(UnknownError(exc))

    return Ok(
        TranscriptionResponse(
            text=text,
            language=language,
            duration=end - start if words else None,
            segments=(TranscriptionSegment(id=0, start=start, end=end, text=text),),
        )
    )
