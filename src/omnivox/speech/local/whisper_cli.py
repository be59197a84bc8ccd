"""
Speech recognition through a locally installed Whisper command-line tool
(openai-whisper or a compatible wrapper).
"""

from __future__ import annotations

import json
import logging
import subprocess
import tempfile
from pathlib import Path
from typing import Sequence

from ...audio.io import save_wav
from ...audio.model import AudioMeta
from ...audio.pipeline import stt_preprocessor, stt_validator
from ...audio.preprocessing import wrap
from ...result import Err, Ok, Result, ServiceError, UnknownError, ValidationError
from ..base import ASRClient, reject_empty_audio, sniff_container
from ..models import ASRTranscriptionOptions, TranscriptionResponse, parse_segments

logger = logging.getLogger(__name__)


class WhisperSpeechToText(ASRClient):
    name = "whisper-cli"

    def __init__(
        self,
        command: Sequence[str] = ("whisper",),
        model: str = "base",
        output_format: str = "json",
        timeout: float | None = None,
    ) -> None:
        if output_format not in ("json", "txt"):
            raise ValueError("output_format must be 'json' or 'txt'")
        self.command = list(command)
        self.model = model
        self.output_format = output_format
        self.timeout = timeout

    def transcribe(
        self, audio_data: bytes, options: ASRTranscriptionOptions | None = None
    ) -> Result[TranscriptionResponse]:
        rejected = reject_empty_audio(audio_data)
        if rejected is not None:
            return rejected
        opts = options or ASRTranscriptionOptions()

        container = sniff_container(audio_data)
        if container == "pcm":
            return Err(ValidationError("Headerless PCM has no sample layout; use transcribe_pcm instead."))
        with tempfile.TemporaryDirectory(prefix="omnivox-whisper-") as workdir:
            input_path = Path(workdir) / f"input.{container}"
            input_path.write_bytes(audio_data)
            return self._run(input_path, Path(workdir), opts)

    def transcribe_pcm(
        self,
        data: bytes,
        meta: AudioMeta,
        options: ASRTranscriptionOptions | None = None,
    ) -> Result[TranscriptionResponse]:
        """Validate and standardize raw PCM16 before handing it to Whisper."""
        prepared = stt_validator().validate((data, meta)).bind(stt_preprocessor().convert)
        if prepared.is_err():
            return Err(ValidationError(prepared.error.message))
        pcm, standard_meta = prepared.unwrap()
        if not pcm:
            return Ok(TranscriptionResponse(text="", language=(options.language if options else None)))

        opts = options or ASRTranscriptionOptions()
        with tempfile.TemporaryDirectory(prefix="omnivox-whisper-") as workdir:
            saved = save_wav(wrap(pcm, standard_meta), Path(workdir) / "input.wav")
            if saved.is_err():
                return Err(UnknownError(OSError(saved.error.message)))
            return self._run(saved.unwrap(), Path(workdir), opts)

    # ------------------------------------------------------------------ #
    # Helpers

    def build_args(
        self, input_path: Path, output_dir: Path, options: ASRTranscriptionOptions
    ) -> list[str]:
        args = self.command + [
            str(input_path),
            "--model",
            self.model,
            "--output_format",
            self.output_format,
            "--output_dir",
            str(output_dir),
        ]
        if options.language:
            args += ["--language", options.language]
        if options.prompt:
            args += ["--initial_prompt", options.prompt]
        if "word" in options.timestamp_granularities and self.output_format == "json":
            args += ["--word_timestamps", "True"]
        return args

    def _run(
        self, input_path: Path, output_dir: Path, options: ASRTranscriptionOptions
    ) -> Result[TranscriptionResponse]:
        args = self.build_args(input_path, output_dir, options)
        logger.debug("Running %s", " ".join(args))
        try:
            completed = subprocess.run(
                args, capture_output=True, text=True, timeout=self.timeout, check=False
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.warning("Whisper CLI could not be run: %s", exc)
            return Err(UnknownError(exc))

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()[-512:]
            return Err(ServiceError(f"whisper exited with {completed.returncode}: {detail}", code=completed.returncode))

        output_path = output_dir / f"{input_path.stem}.{self.output_format}"
        try:
            raw = output_path.read_text(encoding="utf-8")
        except OSError:
            # Some wrappers only print the transcript.
            return Ok(TranscriptionResponse(text=completed.stdout.strip(), language=options.language))
        return self._parse(raw, options)

    def _parse(self, raw: str, options: ASRTranscriptionOptions) -> Result[TranscriptionResponse]:
        if self.output_format == "txt":
            return Ok(TranscriptionResponse(text=raw.strip(), language=options.language))
        try:
            body = json.loads(raw)
            segments = parse_segments(body.get("segments"))
            duration = segments[-1].end if segments else None
            return Ok(
                TranscriptionResponse(
                    text=str(body.get("text", "")).strip(),
                    language=body.get("language") or options.language,
                    duration=duration,
                    segments=segments,
                )
            )
        except (ValueError, TypeError, AttributeError) as exc:
            return Err(UnknownError(exc))
