"""
Option bags and responses for speech synthesis and recognition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class TTSSynthesisOptions:
    """``voice`` and ``model`` left as ``None`` fall back to the adapter's defaults."""

    voice: str | None = None
    model: str | None = None
    response_format: str = "mp3"
    speed: float = 1.0
    temperature: float = 1.0
    language: str | None = None


@dataclass(frozen=True)
class AudioResponse:
    audio_data: bytes
    format: str
    duration: float | None = None
    word_count: int | None = None


@dataclass(frozen=True)
class ASRTranscriptionOptions:
    model: str | None = None
    language: str | None = None
    prompt: str | None = None
    response_format: str = "json"
    temperature: float = 0.0
    timestamp_granularities: tuple[str, ...] = ("word", "segment")


@dataclass(frozen=True)
class TranscriptionSegment:
    id: int
    start: float
    end: float
    text: str
    tokens: tuple[int, ...] = ()
    temperature: float | None = None
    avg_logprob: float | None = None
    compression_ratio: float | None = None
    no_speech_prob: float | None = None


def parse_segments(items: Iterable[Mapping[str, Any]] | None) -> tuple[TranscriptionSegment, ...]:
    """Build segments from Whisper-style ``segments`` JSON entries."""
    return tuple(
        TranscriptionSegment(
            id=int(item.get("id", index)),
            start=float(item.get("start", 0.0)),
            end=float(item.get("end", 0.0)),
            text=str(item.get("text", "")).strip(),
            tokens=tuple(item.get("tokens", ())),
            temperature=item.get("temperature"),
            avg_logprob=item.get("avg_logprob"),
            compression_ratio=item.get("compression_ratio"),
            no_speech_prob=item.get("no_speech_prob"),
        )
        for index, item in enumerate(items or ())
    )


@dataclass(frozen=True)
class TranscriptionResponse:
    text: str
    language: str | None = None
    duration: float | None = None
    segments: tuple[TranscriptionSegment, ...] = field(default_factory=tuple)
