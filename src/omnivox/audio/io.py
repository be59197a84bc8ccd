"""
Reading and writing PCM16 audio files.
"""

from __future__ import annotations

import logging
import struct
import wave
from pathlib import Path
from typing import BinaryIO

from ..result import Err, Ok, OperationFailed, Result, SaveFailed
from .model import AudioMeta, GeneratedAudio, check_frame_alignment

logger = logging.getLogger(__name__)

WAV_HEADER_SIZE = 44


def wav_header(meta: AudioMeta, data_size: int) -> bytes:
    """Canonical 44-byte RIFF/WAVE header for PCM data of ``data_size`` bytes."""
    return b"".join(
        [
            b"RIFF",
            struct.pack("<I", WAV_HEADER_SIZE - 8 + data_size),
            b"WAVE",
            b"fmt ",
            struct.pack("<I", 16),
            struct.pack(
                "<HHIIHH",
                1,
                meta.num_channels,
                meta.sample_rate,
                meta.sample_rate * meta.frame_size,
                meta.frame_size,
                meta.bit_depth,
            ),
            b"data",
            struct.pack("<I", data_size),
        ]
    )


class WavSink:
    """Incrementally writes little-endian PCM16 audio to a WAV file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._fh: BinaryIO | None = None
        self._meta: AudioMeta | None = None
        self._bytes_written: int = 0

    def start(self, meta: AudioMeta) -> None:
        if self._fh is not None:
            raise RuntimeError("WavSink already started.")
        if meta.bit_depth != 16:
            raise ValueError("WavSink only writes 16-bit PCM.")
        self._meta = meta
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("wb")
        self._write_header_placeholder(meta)

    def write(self, pcm_bytes: bytes) -> None:
        if self._fh is None or self._meta is None:
            raise RuntimeError("WavSink must be started before writing.")
        if not pcm_bytes:
            return
        self._fh.write(pcm_bytes)
        self._bytes_written += len(pcm_bytes)

    def close(self) -> None:
        if self._fh is None:
            return
        self._finalise_header()
        self._fh.close()
        self._fh = None
        self._meta = None
        self._bytes_written = 0

    # ------------------------------------------------------------------ #
    # Internal helpers

    def _write_header_placeholder(self, meta: AudioMeta) -> None:
        assert self._fh is not None
        # Sizes are patched in _finalise_header.
        self._fh.write(wav_header(meta, 0))

    def _finalise_header(self) -> None:
        assert self._fh is not None
        data_chunk_size = self._bytes_written
        riff_chunk_size = WAV_HEADER_SIZE - 8 + data_chunk_size

        self._fh.seek(4)
        self._fh.write(struct.pack("<I", riff_chunk_size))
        self._fh.seek(40)
        self._fh.write(struct.pack("<I", data_chunk_size))
        self._fh.seek(0, 2)


def save_wav(audio: GeneratedAudio, path: str | Path) -> Result[Path]:
    """Write ``audio`` as a RIFF/WAVE PCM16 file and return the path."""
    target = Path(path)
    checked = check_frame_alignment(audio.data, audio.meta)
    if checked.is_err():
        return Err(SaveFailed(checked.error.message, context={"path": str(target)}))

    sink = WavSink(target)
    try:
        sink.start(audio.meta)
        try:
            sink.write(audio.data)
        finally:
            sink.close()
    except OSError as exc:
        logger.warning("Failed to save WAV to %s: %s", target, exc)
        return Err(SaveFailed(str(exc) or "Failed to save WAV", context={"path": str(target)}))
    return Ok(target)


def encode_wav(audio: GeneratedAudio) -> bytes:
    """Return ``audio`` as an in-memory WAV file."""
    return wav_header(audio.meta, len(audio.data)) + audio.data


def save_raw_pcm16(audio: GeneratedAudio, path: str | Path) -> Result[Path]:
    """Write the headerless PCM16 payload of ``audio`` and return the path."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(audio.data)
    except OSError as exc:
        logger.warning("Failed to save raw PCM to %s: %s", target, exc)
        return Err(SaveFailed(str(exc) or "Failed to save raw PCM", context={"path": str(target)}))
    return Ok(target)


def load_wav(path: str | Path) -> Result[tuple[bytes, AudioMeta]]:
    """Read a PCM16 WAV file into raw bytes plus its layout."""
    source = Path(path)
    try:
        with wave.open(str(source), "rb") as wav_file:
            meta = AudioMeta(
                sample_rate=wav_file.getframerate(),
                num_channels=wav_file.getnchannels(),
                bit_depth=wav_file.getsampwidth() * 8,
            )
            data = wav_file.readframes(wav_file.getnframes())
    except (OSError, EOFError, wave.Error) as exc:
        return Err(OperationFailed(f"Failed to read WAV: {exc}", context={"path": str(source)}))

    if meta.bit_depth != 16:
        return Err(
            OperationFailed(
                f"Only 16-bit WAV files are supported (got {meta.bit_depth}-bit)",
                context={"path": str(source)},
            )
        )
    return Ok((data, meta))
