"""
Azure Cognitive Services speech client.

Synthesis posts SSML to the regional TTS endpoint; recognition uses the
short-audio REST endpoint, which accepts WAV or OGG uploads of up to 60 s.
"""

from __future__ import annotations

import logging
from xml.sax.saxutils import escape, quoteattr

import requests

from ...result import Err, Ok, Result, UnknownError, ValidationError
from ...transport import HttpTransport
from ..base import ASRClient, TTSClient, reject_blank_text, reject_empty_audio, sniff_container, word_count
from ..config import AzureSpeechConfig
from ..models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TranscriptionSegment,
    TTSSynthesisOptions,
)

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = {
    "mp3": "audio-16khz-128kbitrate-mono-mp3",
    "wav": "riff-16khz-16bit-mono-pcm",
    "pcm": "raw-16khz-16bit-mono-pcm",
    "opus": "ogg-16khz-16bit-mono-opus",
}
DEFAULT_LANGUAGE = "en-US"
TICKS_PER_SECOND = 10_000_000


def build_ssml(text: str, voice: str, language: str, speed: float) -> str:
    rate = f"{(speed - 1.0) * 100:+.0f}%"
    return (
        f"<speak version='1.0' xml:lang={quoteattr(language)}>"
        f"<voice name={quoteattr(voice)}>"
        f"<prosody rate={quoteattr(rate)}>{escape(text)}</prosody>"
        "</voice></speak>"
    )


class AzureSpeechClient(TTSClient, ASRClient):
    def __init__(
        self,
        config: AzureSpeechConfig,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"Ocp-Apim-Subscription-Key": config.api_key},
        )

    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        rejected = reject_blank_text(text)
        if rejected is not None:
            return rejected

        opts = options or TTSSynthesisOptions()
        output_format = OUTPUT_FORMATS.get(opts.response_format)
        if output_format is None:
            return Err(ValidationError(f"Unsupported Azure output format: {opts.response_format}"))

        voice = opts.voice or self.config.model
        ssml = build_ssml(text, voice, opts.language or DEFAULT_LANGUAGE, opts.speed)
        return self._transport.post(
            self.config.tts_endpoint,
            data=ssml.encode("utf-8"),
            headers={
                "Content-Type": "application/ssml+xml",
                "X-Microsoft-OutputFormat": output_format,
                "User-Agent": "omnivox",
            },
        ).map(
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
        language = opts.language or DEFAULT_LANGUAGE
        container = sniff_container(audio_data)
        if container == "ogg":
            content_type = "audio/ogg; codecs=opus"
        elif container in ("wav", "pcm"):
            content_type = "audio/wav; codecs=audio/pcm; samplerate=16000"
        else:
            return Err(ValidationError(f"Azure short-audio recognition does not accept {container} input"))

        url = f"{self.config.stt_endpoint}/speech/recognition/conversation/cognitiveservices/v1"
        return self._transport.post(
            url,
            params={"language": language, "format": "detailed"},
            data=audio_data,
            headers={"Content-Type": content_type, "Accept": "application/json"},
        ).bind(lambda response: _parse_recognition(response, language))

    def close(self) -> None:
        self._transport.close()


def _parse_recognition(response: requests.Response, language: str) -> Result[TranscriptionResponse]:
    try:
        body = response.json()
        status = body.get("RecognitionStatus", "Success")
        if status != "Success":
            return Err(ValidationError(f"No speech recognized ({status})"))

        best = (body.get("NBest") or [{}])[0]
        text = str(body.get("DisplayText") or best.get("Display") or "")
        offset = float(body.get("Offset", 0)) / TICKS_PER_SECOND
        duration = float(body.get("Duration", 0)) / TICKS_PER_SECOND
    except (ValueError, TypeError, AttributeError, IndexError) as exc:
        logger.warning("Unexpected Azure recognition payload: %s", exc)
        return Err(UnknownError(exc))

    segment = TranscriptionSegment(id=0, start=offset, end=offset + duration, text=text)
    return Ok(
        TranscriptionResponse(
            text=text,
            language=language,
            duration=duration or None,
            segments=(segment,),
        )
    )
