"""
Pure PCM16 transformations used before speech recognition.

Every function takes ``(data, meta)`` and returns ``Ok((data, meta))`` or
``Err(OperationFailed)``. Inputs are never modified and each call allocates
its own output, so the functions are safe to call from several threads.

Rounding policy:

* ``to_mono`` sums channels in int32 and truncates the mean toward zero.
  The mean of int16 values always fits int16, so two channels at -32768 give
  exactly -32768.
* ``resample_pcm16`` interpolates linearly in float64, rounds half to even and
  saturates to [-32768, 32767].
* ``trim_silence`` measures loudness in int32 so ``abs(-32768)`` is 32768.
"""

from __future__ import annotations

import logging

import numpy as np

from ..result import Err, Ok, OperationFailed, Result
from .model import AudioFormat, AudioMeta, GeneratedAudio, check_frame_alignment

logger = logging.getLogger(__name__)

PCM16 = np.dtype("<i2")
INT16_MIN = -32768
INT16_MAX = 32767
DEFAULT_SILENCE_THRESHOLD = 512
STT_SAMPLE_RATE = 16_000

Processed = Result[tuple[bytes, AudioMeta]]


def _frames(data: bytes, meta: AudioMeta) -> np.ndarray:
    return np.frombuffer(data, dtype=PCM16).reshape(-1, meta.num_channels)


def _failed(step: str, exc: Exception) -> Err:
    logger.debug("%s failed: %s", step, exc)
    return Err(OperationFailed(str(exc) or f"{step} failed", context={"step": step}))


def resample_pcm16(data: bytes, source: AudioMeta, target_rate: int) -> Processed:
    """Resample to ``target_rate`` keeping channel count and bit depth."""
    checked = check_frame_alignment(data, source)
    if checked.is_err():
        return checked
    if target_rate <= 0:
        return Err(OperationFailed(f"Target sample rate must be positive (got {target_rate})"))
    if target_rate == source.sample_rate:
        return Ok((data, source))

    target = source.with_rate(target_rate)
    try:
        frames = _frames(data, source)
        in_count = frames.shape[0]
        out_count = int(round(in_count * target_rate / source.sample_rate))
        if in_count == 0 or out_count == 0:
            return Ok((b"", target))

        positions = np.arange(out_count, dtype=np.float64) * (source.sample_rate / target_rate)
        np.minimum(positions, in_count - 1, out=positions)
        grid = np.arange(in_count, dtype=np.float64)

        out = np.empty((out_count, source.num_channels), dtype=np.float64)
        for channel in range(source.num_channels):
            out[:, channel] = np.interp(positions, grid, frames[:, channel].astype(np.float64))

        pcm = np.clip(np.rint(out), INT16_MIN, INT16_MAX).astype(PCM16)
    except (ValueError, TypeError, MemoryError) as exc:
        return _failed("resample", exc)
    return Ok((pcm.tobytes(), target))


def to_mono(data: bytes, meta: AudioMeta) -> Processed:
    """Downmix by averaging channels per frame."""
    checked = check_frame_alignment(data, meta)
    if checked.is_err():
        return checked
    if meta.num_channels <= 1:
        return Ok((data, meta))

    try:
        totals = _frames(data, meta).astype(np.int32).sum(axis=1)
        means = np.sign(totals) * (np.abs(totals) // meta.num_channels)
        mono = np.clip(means, INT16_MIN, INT16_MAX).astype(PCM16)
    except (ValueError, TypeError, MemoryError) as exc:
        return _failed("to_mono", exc)
    return Ok((mono.tobytes(), meta.with_channels(1)))


def trim_silence(
    data: bytes, meta: AudioMeta, threshold: int = DEFAULT_SILENCE_THRESHOLD
) -> Processed:
    """Keep the frames between the first and last frame at or above ``threshold``."""
    checked = check_frame_alignment(data, meta)
    if checked.is_err():
        return checked

    try:
        loudness = np.abs(_frames(data, meta).astype(np.int32)).max(axis=1, initial=0)
        loud = np.flatnonzero(loudness >= threshold)
    except (ValueError, TypeError, MemoryError) as exc:
        return _failed("trim_silence", exc)

    if loud.size == 0:
        return Ok((b"", meta))
    start = int(loud[0]) * meta.frame_size
    end = (int(loud[-1]) + 1) * meta.frame_size
    return Ok((data[start:end], meta))


def standardize_for_stt(
    data: bytes, meta: AudioMeta, target_rate: int = STT_SAMPLE_RATE
) -> Processed:
    """Mono, then resample, then trim silence; stops at the first failure."""
    return (
        to_mono(data, meta)
        .bind(lambda step: resample_pcm16(step[0], step[1], target_rate))
        .bind(lambda step: trim_silence(step[0], step[1]))
    )


def wrap(
    data: bytes, meta: AudioMeta, format: AudioFormat = AudioFormat.WAV_PCM16
) -> GeneratedAudio:
    return GeneratedAudio(data, meta, format)
