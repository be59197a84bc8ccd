"""
PCM audio descriptors shared by preprocessing, IO and the speech adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from ..result import Err, Ok, OperationFailed, Result


@dataclass(frozen=True)
class AudioMeta:
    """Physical layout of a little-endian signed PCM buffer."""

    sample_rate: int
    num_channels: int
    bit_depth: int = 16

    @property
    def sample_width(self) -> int:
        return self.bit_depth // 8

    @property
    def frame_size(self) -> int:
        return self.num_channels * self.sample_width

    def with_rate(self, sample_rate: int) -> "AudioMeta":
        return replace(self, sample_rate=sample_rate)

    def with_channels(self, num_channels: int) -> "AudioMeta":
        return replace(self, num_channels=num_channels)

    def num_frames(self, num_bytes: int) -> int:
        return num_bytes // self.frame_size if self.frame_size > 0 else 0

    def duration_seconds(self, num_bytes: int) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return self.num_frames(num_bytes) / self.sample_rate


class AudioFormat(str, Enum):
    WAV_PCM16 = "wav"
    RAW_PCM16 = "pcm"
    MP3 = "mp3"
    OGG_OPUS = "opus"
    FLAC = "flac"


@dataclass(frozen=True)
class GeneratedAudio:
    data: bytes
    meta: AudioMeta
    format: AudioFormat = AudioFormat.WAV_PCM16

    @property
    def duration_seconds(self) -> float:
        return self.meta.duration_seconds(len(self.data))


def check_frame_alignment(data: bytes, meta: AudioMeta) -> Result[tuple[bytes, AudioMeta]]:
    """Reject layouts we cannot read and buffers that end mid-frame."""
    if meta.bit_depth != 16:
        return Err(OperationFailed(f"Only 16-bit PCM is supported (got {meta.bit_depth}-bit)"))
    if meta.sample_rate <= 0:
        return Err(OperationFailed("Sample rate must be positive"))
    if meta.num_channels <= 0:
        return Err(OperationFailed("Number of channels must be positive"))
    if len(data) % meta.frame_size != 0:
        return Err(
            OperationFailed(
                f"Audio data length ({len(data)}) is not a multiple of frame size ({meta.frame_size})",
                context={"length": str(len(data)), "frame_size": str(meta.frame_size)},
            )
        )
    return Ok((data, meta))
