"""
Capability interfaces for speech backends.

Adapters implement one or both of these. Calls never raise for provider or
input problems; they return ``Err`` with an operation error variant.
"""

from __future__ import annotations

import abc

from ..result import Err, Result, ValidationError
from .models import (
    ASRTranscriptionOptions,
    AudioResponse,
    TranscriptionResponse,
    TTSSynthesisOptions,
)


class TTSClient(abc.ABC):
    """Text-to-speech: text -> encoded audio."""

    @abc.abstractmethod
    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        """Synthesize ``text`` with the given options."""


class ASRClient(abc.ABC):
    """Speech recognition: audio bytes -> transcript."""

    @abc.abstractmethod
    def transcribe(
        self, audio_data: bytes, options: ASRTranscriptionOptions | None = None
    ) -> Result[TranscriptionResponse]:
        """Transcribe an encoded audio file (wav, mp3, ...)."""


def reject_blank_text(text: str) -> Err | None:
    if not text or not text.strip():
        return Err(ValidationError("Text to synthesize must not be empty"))
    return None


def reject_empty_audio(audio_data: bytes) -> Err | None:
    if not audio_data:
        return Err(ValidationError("Audio data must not be empty"))
    return None


def word_count(text: str) -> int:
    return len(text.split())


def sniff_container(audio_data: bytes) -> str:
    """Guess the container of an uploaded clip from its magic bytes."""
    head = audio_data[:12]
    if head.startswith(b"RIFF") and head[8:12] == b"WAVE":
        return "wav"
    if head.startswith(b"ID3") or (len(head) > 1 and head[0] == 0xFF and head[1] & 0xE0 == 0xE0):
        return "mp3"
    if head.startswith(b"OggS"):
        return "ogg"
    if head.startswith(b"fLaC"):
        return "flac"
    return "pcm"
