"""
Configuration loader for the ``omnivox`` command line, merging defaults, a
TOML config file, environment, and CLI args.

Provider credentials and the ``*_MODEL`` variables are not part of this
config; they are read from the environment at dispatch time.
"""

from __future__ import annotations

import argparse
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Mapping, MutableMapping, Tuple

DEFAULT_CONFIG_FILENAME = "omnivox.toml"
LOG_FORMATS = ("human", "json")


@dataclass
class AppConfig:
    """High-level application configuration container."""

    timeout_ms: int = 30_000
    log_format: str = "human"
    json_log: bool = False
    target_sample_rate: int = 16_000
    silence_threshold: int = 512
    output_dir: str | None = None
    voice: str | None = None
    response_format: str | None = None
    dry_run: bool = False
    extra: dict[str, Any] = field(default_factory=dict)


def load_default_config() -> AppConfig:
    """Return default configuration for the CLI."""

    return AppConfig()


def load_config(
    args: argparse.Namespace | None = None,
    *,
    env: Mapping[str, str] | None = None,
    config_file: str | Path | None = None,
) -> AppConfig:
    """
    Load configuration merging defaults, config file, environment, then CLI.

    Precedence: CLI args > environment variables > config file > defaults.
    """

    defaults = load_default_config()
    config_data: dict[str, Any] = {
        key: getattr(defaults, key) for key in _known_fields()
    }
    extras: dict[str, Any] = {}

    resolved_config_path = _resolve_config_path(args, config_file)
    if resolved_config_path is not None:
        file_config, file_extras = _load_from_file(resolved_config_path)
        config_data.update(file_config)
        extras.update(file_extras)

    env_config = _load_from_env(env)
    config_data.update(env_config)

    cli_config = _load_from_cli(args)
    config_data.update(cli_config)

    if config_data.get("json_log"):
        config_data["log_format"] = "json"

    validated = _validate_config(config_data)

    combined_extras = {**extras, **validated.pop("extra", {})}
    if combined_extras:
        validated["extra"] = combined_extras

    return AppConfig(**validated)


def _known_fields() -> set[str]:
    return {f.name for f in fields(AppConfig) if f.init and f.name != "extra"}


def _resolve_config_path(
    args: argparse.Namespace | None, config_file: str | Path | None
) -> Path | None:
    candidate: str | Path | None = None
    if args is not None and getattr(args, "config", None):
        candidate = getattr(args, "config")
    elif config_file is not None:
        candidate = config_file

    if candidate is None:
        default_path = Path(DEFAULT_CONFIG_FILENAME)
        return default_path if default_path.exists() else None

    path = Path(candidate).expanduser()
    return path if path.exists() else None


def _load_from_file(path: Path) -> Tuple[dict[str, Any], dict[str, Any]]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except FileNotFoundError:
        return {}, {}

    return _partition_known(data)


def _flag(value: Any) -> bool:
    return str(value).lower() in {"1", "true", "yes"}


ENV_KEY_MAP: dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "OMNIVOX_TIMEOUT_MS": ("timeout_ms", int),
    "OMNIVOX_LOG_FORMAT": ("log_format", str),
    "OMNIVOX_JSON_LOG": ("json_log", _flag),
    "OMNIVOX_TARGET_SAMPLE_RATE": ("target_sample_rate", int),
    "OMNIVOX_SILENCE_THRESHOLD": ("silence_threshold", int),
    "OMNIVOX_OUTPUT_DIR": ("output_dir", str),
    "OMNIVOX_VOICE": ("voice", str),
    "OMNIVOX_RESPONSE_FORMAT": ("response_format", str),
    "OMNIVOX_DRY_RUN": ("dry_run", _flag),
}


def _load_from_env(env: Mapping[str, str] | None) -> dict[str, Any]:
    source = env if env is not None else os.environ
    result: dict[str, Any] = {}
    for env_key, (config_key, caster) in ENV_KEY_MAP.items():
        if env_key in source and source[env_key] != "":
            try:
                result[config_key] = caster(source[env_key])
            except ValueError as exc:
                raise ValueError(f"{env_key} has an invalid value: {source[env_key]!r}") from exc
    return result


CLI_ATTR_MAP: dict[str, Tuple[str, Callable[[Any], Any]]] = {
    "timeout": ("timeout_ms", int),
    "timeout_ms": ("timeout_ms", int),
    "log_format": ("log_format", str),
    "json_log": ("json_log", bool),
    "rate": ("target_sample_rate", int),
    "threshold": ("silence_threshold", int),
    "output_dir": ("output_dir", str),
    "voice": ("voice", str),
    "format": ("response_format", str),
    "dry_run": ("dry_run", bool),
}


def _load_from_cli(args: argparse.Namespace | None) -> dict[str, Any]:
    if args is None:
        return {}

    result: dict[str, Any] = {}
    for attr_name, (config_key, caster) in CLI_ATTR_MAP.items():
        if hasattr(args, attr_name):
            value = getattr(args, attr_name)
            if value is None:
                continue
            if isinstance(value, bool) and caster is bool:
                # store_true flags are False when absent; only an explicit flag overrides.
                if value:
                    result[config_key] = value
            else:
                result[config_key] = caster(value)
    return result


def _partition_known(data: Mapping[str, Any]) -> Tuple[dict[str, Any], dict[str, Any]]:
    known: dict[str, Any] = {}
    extras: dict[str, Any] = {}
    known_keys = _known_fields()
    for key, value in data.items():
        if key in known_keys:
            known[key] = value
        else:
            extras[key] = value
    return known, extras


def _validate_config(data: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    timeout_ms = data.get("timeout_ms")
    if timeout_ms is not None and int(timeout_ms) <= 0:
        raise ValueError("timeout_ms must be positive")

    target_sample_rate = data.get("target_sample_rate")
    if target_sample_rate is not None and int(target_sample_rate) <= 0:
        raise ValueError("target_sample_rate must be positive")

    silence_threshold = data.get("silence_threshold")
    if silence_threshold is not None and int(silence_threshold) < 0:
        raise ValueError("silence_threshold must be non-negative")

    log_format = data.get("log_format")
    if log_format is not None and log_format not in LOG_FORMATS:
        raise ValueError(f"log_format must be one of {', '.join(LOG_FORMATS)}")

    return data
