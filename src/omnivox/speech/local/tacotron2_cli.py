"""
Speech synthesis through a locally hosted Tacotron2 command-line wrapper.

The wrapper is expected to accept ``--text`` and ``--out`` and write a PCM16
WAV file to the output path.
"""

from __future__ import annotations

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Sequence

from ...audio.io import encode_wav, load_wav
from ...audio.model import AudioFormat, GeneratedAudio
from ...result import Err, Ok, Result, ServiceError, UnknownError
from ..base import TTSClient, reject_blank_text, word_count
from ..models import AudioResponse, TTSSynthesisOptions

logger = logging.getLogger(__name__)


class Tacotron2TextToSpeech(TTSClient):
    name = "tacotron2-cli"

    def __init__(
        self,
        command: Sequence[str] = ("tacotron2-cli",),
        timeout: float | None = None,
    ) -> None:
        self.command = list(command)
        self.timeout = timeout

    def synthesize(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[AudioResponse]:
        return self.synthesize_audio(text, options).bind(
            lambda audio: Ok(
                AudioResponse(
                    audio_data=encode_wav(audio),
                    format="wav",
                    duration=audio.duration_seconds,
                    word_count=word_count(text),
                )
            )
        )

    def synthesize_audio(
        self, text: str, options: TTSSynthesisOptions | None = None
    ) -> Result[GeneratedAudio]:
        """Synthesize ``text`` and return the decoded PCM16 samples."""
        rejected = reject_blank_text(text)
        if rejected is not None:
            return rejected

        with tempfile.TemporaryDirectory(prefix="omnivox-tts-") as workdir:
            out_path = Path(workdir) / "speech.wav"
            args = self.build_args(text, out_path, options)
            logger.debug("Running %s", self.command[0])
            try:
                completed = subprocess.run(
                    args, capture_output=True, text=True, timeout=self.timeout, check=False
                )
            except (OSError, subprocess.SubprocessError) as exc:
                logger.warning("Tacotron2 CLI could not be run: %s", exc)
                return Err(UnknownError(exc))

            if completed.returncode != 0:
                detail = (completed.stderr or "").strip()[-512:]
                return Err(
                    ServiceError(
                        f"{self.command[0]} exited with {completed.returncode}: {detail}",
                        code=completed.returncode,
                    )
                )

            loaded = load_wav(out_path)
            if loaded.is_err():
                return Err(UnknownError(OSError(loaded.error.message)))
            data, meta = loaded.unwrap()
            return Ok(GeneratedAudio(data=data, meta=meta, format=AudioFormat.WAV_PCM16))

    def build_args(
        self, text: str, out_path: Path, options: TTSSynthesisOptions | None
    ) -> list[str]:
        args = self.command + ["--text", text, "--out", str(out_path)]
        if options is None:
            return args
        if options.voice:
            args += ["--voice", options.voice]
        if options.language:
            args += ["--lang", options.language]
        if options.speed != 1.0:
            args += ["--rate", str(options.speed)]
        return args

