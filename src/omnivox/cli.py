"""
Command-line interface for omnivox.

Each subcommand resolves its provider from the environment (``SPEECH_MODEL``,
``LLM_MODEL``, ``IMAGE_MODEL``), performs one call and writes or prints the
result. ``preprocess`` runs the offline PCM16 pipeline and needs no provider.

Exit codes: 0 success, 2 configuration or usage error, 3 provider or
processing error, 4 audio device error.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from . import __version__
from .audio.io import encode_wav, load_wav, save_wav
from .audio.model import AudioFormat, AudioMeta, GeneratedAudio
from .audio.pipeline import stt_preprocessor, stt_validator
from .audio.preprocessing import wrap
from .config import AppConfig, load_config
from .env import TIMEOUT_VARIABLE, EnvSource, coerce_env
from .errors import AudioDeviceError, ConfigurationError
from .image.connect import get_client as get_image_client
from .image.models import ImageGenerationOptions, ImageSize
from .llm.connect import get_client as get_llm_client
from .llm.models import CompletionOptions, Conversation, Message
from .logging_utils import get_event_logger, set_default_format
from .result import Err, Ok, OperationError, Result, SaveFailed, describe
from .speech.base import sniff_container
from .speech.connect import get_asr_client, get_tts_client
from .speech.models import ASRTranscriptionOptions, TTSSynthesisOptions

logger = logging.getLogger(__name__)
events = get_event_logger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_PROVIDER = 3
EXIT_DEVICE = 4


class UsageError(Exception):
    """Bad command-line input detected after argument parsing."""


def create_parser() -> argparse.ArgumentParser:
    """Create the top-level argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="omnivox",
        description=(
            "Speech synthesis, transcription, LLM completion and image generation\n"
            "through the provider named by SPEECH_MODEL, LLM_MODEL or IMAGE_MODEL."
        ),
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to an optional configuration file (omnivox.toml).",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        metavar="MS",
        help="Network timeout in milliseconds (default 30000).",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Emit logs as JSON lines.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve the provider and show it without sending any request.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"omnivox {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (repeatable).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-essential log output.",
    )

    commands = parser.add_subparsers(dest="command", metavar="COMMAND")
    commands.required = True

    speak = commands.add_parser("speak", help="Synthesize speech from text.")
    speak.add_argument("text", nargs="?", help="Text to speak. Reads STDIN when omitted.")
    speak.add_argument("--out", metavar="PATH", help="Where to write the audio file.")
    speak.add_argument("--voice", help="Voice name or identifier.")
    speak.add_argument("--format", help="Audio format requested from the provider (mp3, wav, ...).")
    speak.add_argument(
        "--play",
        action="store_true",
        help="Play the result on the default output device (requires wav output).",
    )

    transcribe = commands.add_parser("transcribe", help="Transcribe an audio file.")
    transcribe.add_argument("path", help="Audio file to transcribe.")
    transcribe.add_argument("--language", help="Spoken language hint (ISO-639-1).")
    transcribe.add_argument(
        "--no-standardize",
        dest="no_standardize",
        action="store_true",
        help="Upload WAV input as-is instead of converting to mono 16 kHz first.",
    )

    complete = commands.add_parser("complete", help="Ask the configured LLM.")
    complete.add_argument("prompt", nargs="?", help="User prompt. Reads STDIN when omitted.")
    complete.add_argument("--system", help="System prompt.")
    complete.add_argument("--max-tokens", dest="max_tokens", type=int, help="Completion token limit.")

    image = commands.add_parser("image", help="Generate an image from a prompt.")
    image.add_argument("prompt", help="Image description.")
    image.add_argument("--out", metavar="PATH", help="Where to write the image.")
    image.add_argument(
        "--size",
        choices=[size.description for size in ImageSize],
        default=ImageSize.SQUARE_512.description,
        help="Image size (default 512x512).",
    )

    preprocess = commands.add_parser(
        "preprocess", help="Convert a PCM16 WAV to mono, resample it and trim silence."
    )
    preprocess.add_argument("input", help="Source WAV file.")
    preprocess.add_argument("output", help="Destination WAV file.")
    preprocess.add_argument("--rate", type=int, help="Target sample rate (default 16000).")
    preprocess.add_argument("--threshold", type=int, help="Silence threshold (default 512).")
    return parser


def _configure_logging(verbosity: int, quiet: bool) -> None:
    """Configure root logger based on verbosity flags."""
    if quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING
        if verbosity == 1:
            level = logging.INFO
        elif verbosity >= 2:
            level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger.debug("Logging configured (level=%s)", logging.getLevelName(level))


def _resolve_input_text(value: str | None) -> str:
    if value:
        return value

    if not sys.stdin.isatty():
        try:
            return sys.stdin.read().strip()
        except OSError:
            logger.debug("stdin read failed; returning empty input.")
    return ""


def _report(error: OperationError) -> int:
    logger.error("%s", describe(error))
    print(f"omnivox: {describe(error)}", file=sys.stderr)
    return EXIT_PROVIDER


def _print_dry_run(client: object) -> int:
    config = getattr(client, "config", None)
    model = getattr(config, "model", "") or "(default)"
    print("Dry run mode. No request sent.")
    print(f"Provider: {type(client).__name__} | Model: {model}")
    return EXIT_OK


def _default_output(config: AppConfig, filename: str) -> Path:
    base = Path(config.output_dir) if config.output_dir else Path.cwd()
    return base / filename


def _write_bytes(path: Path, data: bytes) -> Result[Path]:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        return Err(SaveFailed(str(exc), context={"path": str(path)}))
    return Ok(path)


def _standardize(
    data: bytes, meta: AudioMeta, config: AppConfig
) -> Result[tuple[bytes, AudioMeta]]:
    preprocessor = stt_preprocessor(config.target_sample_rate, config.silence_threshold)
    return stt_validator().validate((data, meta)).bind(preprocessor.convert)


# --------------------------------------------------------------------------- #
# Commands


def _cmd_speak(args: argparse.Namespace, config: AppConfig, env: EnvSource) -> int:
    text = _resolve_input_text(args.text)
    if not text:
        raise UsageError("Nothing to speak. Pass TEXT or pipe it via STDIN.")

    response_format = config.response_format or ("wav" if args.play else "mp3")
    if args.play and response_format != "wav":
        raise UsageError("--play needs wav output; drop --format or pass --format wav.")

    client = get_tts_client(env)
    if config.dry_run:
        return _print_dry_run(client)

    options = TTSSynthesisOptions(voice=config.voice, response_format=response_format)
    result = client.synthesize(text, options)
    if result.is_err():
        return _report(result.error)

    audio = result.unwrap()
    out_path = Path(args.out) if args.out else _default_output(config, f"speech.{audio.format}")
    saved = _write_bytes(out_path, audio.audio_data)
    if saved.is_err():
        return _report(saved.error)
    events.log("speech_saved", path=str(out_path), bytes=len(audio.audio_data))
    print(out_path)

    if args.play:
        loaded = load_wav(out_path)
        if loaded.is_err():
            return _report(loaded.error)
        data, meta = loaded.unwrap()
        _play(GeneratedAudio(data, meta, AudioFormat.WAV_PCM16))
    return EXIT_OK


def _play(audio: GeneratedAudio) -> None:
    try:
        from .audio.playback import play
    except OSError as exc:
        # sounddevice raises OSError at import time when PortAudio is missing.
        raise AudioDeviceError(str(exc)) from exc
    play(audio)


def _cmd_transcribe(args: argparse.Namespace, config: AppConfig, env: EnvSource) -> int:
    path = Path(args.path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise UsageError(f"Failed to read audio file '{path}': {exc}") from exc

    client = get_asr_client(env)
    if config.dry_run:
        return _print_dry_run(client)

    if not args.no_standardize and sniff_container(data) == "wav":
        prepared = load_wav(path).bind(lambda loaded: _standardize(loaded[0], loaded[1], config))
        if prepared.is_err():
            return _report(prepared.error)
        pcm, meta = prepared.unwrap()
        if not pcm:
            logger.warning("No speech above the silence threshold in %s", path)
            print("")
            return EXIT_OK
        data = encode_wav(wrap(pcm, meta))

    result = client.transcribe(data, ASRTranscriptionOptions(language=args.language))
    if result.is_err():
        return _report(result.error)
    print(result.unwrap().text)
    return EXIT_OK


def _cmd_complete(args: argparse.Namespace, config: AppConfig, env: EnvSource) -> int:
    prompt = _resolve_input_text(args.prompt)
    if not prompt:
        raise UsageError("Nothing to send. Pass PROMPT or pipe it via STDIN.")

    client = get_llm_client(env)
    if config.dry_run:
        return _print_dry_run(client)

    conversation = Conversation()
    if args.system:
        conversation = conversation.add(Message.system(args.system))
    conversation = conversation.add(Message.user(prompt))

    result = client.complete(conversation, CompletionOptions(max_tokens=args.max_tokens))
    if result.is_err():
        return _report(result.error)
    completion = result.unwrap()
    if completion.usage is not None:
        events.log(
            "completion_usage",
            model=completion.model,
            prompt_tokens=completion.usage.prompt_tokens,
            completion_tokens=completion.usage.completion_tokens,
        )
    print(completion.content)
    return EXIT_OK


def _cmd_image(args: argparse.Namespace, config: AppConfig, env: EnvSource) -> int:
    client = get_image_client(env)
    if config.dry_run:
        return _print_dry_run(client)

    options = ImageGenerationOptions(size=ImageSize.parse(args.size))
    out_path = (
        Path(args.out) if args.out else _default_output(config, f"image.{options.format.extension}")
    )
    result = client.generate_image(args.prompt, options).bind(
        lambda image: image.save_to_file(out_path)
    )
    if result.is_err():
        return _report(result.error)
    print(result.unwrap().file_path)
    return EXIT_OK


def _cmd_preprocess(args: argparse.Namespace, config: AppConfig, env: EnvSource) -> int:
    source = Path(args.input)
    loaded = load_wav(source)
    if loaded.is_err():
        return _report(loaded.error)
    data, meta = loaded.unwrap()

    if config.dry_run:
        print("Dry run mode. Nothing written.")
        print(
            f"Input: {meta.num_channels}ch {meta.sample_rate}Hz "
            f"{meta.duration_seconds(len(data)):.2f}s -> "
            f"1ch {config.target_sample_rate}Hz, threshold {config.silence_threshold}"
        )
        return EXIT_OK

    result = _standardize(data, meta, config).bind(
        lambda step: save_wav(wrap(step[0], step[1]), args.output).map(lambda path: (step, path))
    )
    if result.is_err():
        return _report(result.error)
    (pcm, out_meta), path = result.unwrap()
    print(
        f"{source} ({meta.num_channels}ch {meta.sample_rate}Hz "
        f"{meta.duration_seconds(len(data)):.2f}s) -> {path} "
        f"({out_meta.num_channels}ch {out_meta.sample_rate}Hz "
        f"{out_meta.duration_seconds(len(pcm)):.2f}s)"
    )
    return EXIT_OK


COMMANDS: dict[str, Callable[[argparse.Namespace, AppConfig, EnvSource], int]] = {
    "speak": _cmd_speak,
    "transcribe": _cmd_transcribe,
    "complete": _cmd_complete,
    "image": _cmd_image,
    "preprocess": _cmd_preprocess,
}


def main(
    argv: Optional[Sequence[str]] = None, *, env: Mapping[str, str] | None = None
) -> int:
    """Entry point invoked by `python -m omnivox` or console scripts."""
    parser = create_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose, args.quiet)
    source = coerce_env(env)
    try:
        config = load_config(args, env=source)
    except ValueError as exc:
        print(f"omnivox: invalid configuration: {exc}", file=sys.stderr)
        return EXIT_USAGE
    set_default_format(config.log_format)
    logger.debug("Loaded configuration: %s", config)

    # Adapters read the timeout from the environment source; left unset, image
    # backends keep their longer default.
    if args.timeout is not None or config.timeout_ms != AppConfig.timeout_ms:
        source = source.with_overrides(**{TIMEOUT_VARIABLE: str(config.timeout_ms)})

    try:
        return COMMANDS[args.command](args, config, source)
    except UsageError as exc:
        print(f"omnivox: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        print(f"omnivox: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except AudioDeviceError as exc:
        logger.error("Playback failure: %s", exc)
        print(f"omnivox: audio device error: {exc}", file=sys.stderr)
        return EXIT_DEVICE


if __name__ == "__main__":  # pragma: no cover - allows `python cli.py`
    raise SystemExit(main())
