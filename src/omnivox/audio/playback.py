"""
Audio playback engine implemented with sounddevice.

The engine accepts PCM16 buffers and writes them to the system's default
output device. Exceptions from PortAudio are mapped to `AudioDeviceError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import sounddevice as sd

from ..errors import AudioDeviceError
from .io import WavSink
from .model import AudioFormat, AudioMeta, GeneratedAudio

logger = logging.getLogger(__name__)


class PlaybackEngine:
    """Minimal playback engine that writes PCM16 audio via sounddevice."""

    def __init__(
        self,
        *,
        device: int | str | None = None,
        blocksize: int = 0,
        wav_path: str | Path | None = None,
    ) -> None:
        self._device = device
        self._blocksize = blocksize
        self._meta: Optional[AudioMeta] = None
        self._stream: sd.RawOutputStream | None = None
        self._wav_sink: WavSink | None = WavSink(wav_path) if wav_path else None

    def start(self, meta: AudioMeta) -> None:
        """Start the underlying sounddevice RawOutputStream."""
        if self._stream is not None:
            raise AudioDeviceError("PlaybackEngine already started.")
        if meta.bit_depth != 16:
            raise AudioDeviceError("PlaybackEngine only plays 16-bit PCM.")

        try:
            self._stream = sd.RawOutputStream(
                samplerate=meta.sample_rate,
                channels=meta.num_channels,
                dtype="int16",
                blocksize=self._blocksize,
                device=self._device,
                finished_callback=lambda: logger.debug("Audio stream finished."),
            )
            self._stream.start()
            self._meta = meta
            if self._wav_sink is not None:
                self._wav_sink.start(meta)
            logger.debug(
                "PlaybackEngine started (sample_rate=%s, channels=%s, device=%s)",
                meta.sample_rate,
                meta.num_channels,
                self._stream.device,
            )
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            self._stream = None
            logger.error("Failed to start audio stream: %s", exc)
            raise AudioDeviceError(str(exc)) from exc

    def submit(self, pcm_bytes: bytes) -> None:
        """Write PCM16 frames to the output device."""
        if self._stream is None or self._meta is None:
            raise AudioDeviceError("PlaybackEngine.start() must be called before submit().")

        if len(pcm_bytes) % self._meta.frame_size != 0:
            raise AudioDeviceError(
                f"PCM16 payload length must be a multiple of the frame size ({self._meta.frame_size})."
            )

        try:
            self._stream.write(pcm_bytes)
            logger.debug("PlaybackEngine wrote %s bytes", len(pcm_bytes))
            if self._wav_sink is not None:
                self._wav_sink.write(pcm_bytes)
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            logger.error("Audio stream write failed: %s", exc)
            raise AudioDeviceError(str(exc)) from exc

    def flush_and_close(self) -> None:
        """Stop and close the underlying stream."""
        if self._stream is None:
            logger.debug("flush_and_close() called without an active stream.")
            return

        try:
            self._stream.stop()
            self._stream.close()
            logger.debug("PlaybackEngine stream closed.")
        except sd.PortAudioError as exc:  # pragma: no cover - hardware dependent
            logger.error("Failed to close audio stream: %s", exc)
            raise AudioDeviceError(str(exc)) from exc
        finally:
            self._stream = None
            self._meta = None
            if self._wav_sink is not None:
                self._wav_sink.close()


def play(audio: GeneratedAudio, *, device: int | str | None = None) -> None:
    """Play a PCM16 ``GeneratedAudio`` to completion."""
    if audio.format not in (AudioFormat.WAV_PCM16, AudioFormat.RAW_PCM16):
        raise AudioDeviceError(f"Cannot play {audio.format.value} audio; PCM16 required.")
    engine = PlaybackEngine(device=device)
    engine.start(audio.meta)
    try:
        engine.submit(audio.data)
    finally:
        engine.flush_and_close()
