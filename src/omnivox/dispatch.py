"""
Provider resolution shared by the speech, LLM and image capabilities.

Each capability describes its providers as a table of ``ProviderSpec`` rows.
Resolution from the environment reads one ``<CAPABILITY>_MODEL`` variable of
the form ``provider/model-name``, picks the row by prefix, builds the provider
config from the environment and instantiates the adapter. No network I/O
happens here; adapters open their sessions on first use.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, Sequence, TypeVar

from .env import coerce_env, expect_config, parse_model_string, read_model_variable
from .errors import ConfigurationError, UnknownProviderError, UnsupportedProviderError
from .logging_utils import get_event_logger

events = get_event_logger(__name__)

ClientT = TypeVar("ClientT")


@dataclass(frozen=True)
class ProviderSpec(Generic[ClientT]):
    provider: Enum
    prefix: str | None
    config_type: type | None
    build: Callable[[Any], ClientT] | None
    unsupported_reason: str = ""

    @property
    def supported(self) -> bool:
        return self.build is not None and self.config_type is not None


@dataclass(frozen=True)
class Capability(Generic[ClientT]):
    name: str
    model_variable: str
    specs: Sequence[ProviderSpec[ClientT]]

    def supported_prefixes(self) -> list[str]:
        return [spec.prefix for spec in self.specs if spec.prefix and spec.supported]

    def spec_for_prefix(self, prefix: str) -> ProviderSpec[ClientT] | None:
        for spec in self.specs:
            if spec.prefix == prefix:
                return spec
        return None

    def spec_for_provider(self, provider: Enum) -> ProviderSpec[ClientT] | None:
        for spec in self.specs:
            if spec.provider is provider:
                return spec
        return None


def _unsupported(capability: Capability[Any], spec: ProviderSpec[Any]) -> UnsupportedProviderError:
    reason = spec.unsupported_reason or (
        f"{spec.provider.value} does not support {capability.name}"
    )
    return UnsupportedProviderError(reason)


def resolve_from_env(
    capability: Capability[ClientT], env: Mapping[str, str] | None = None
) -> ClientT:
    """Resolve the capability's model variable into a ready client."""
    source = coerce_env(env)
    model = read_model_variable(source, capability.model_variable, capability.name)

    try:
        prefix, model_name = parse_model_string(model)
    except ConfigurationError:
        prefix, model_name = "", model

    spec = capability.spec_for_prefix(prefix) if prefix else None
    if spec is None or not spec.supported:
        supported = ", ".join(f"'{p}/model-name'" for p in capability.supported_prefixes())
        reason = (
            f"unknown provider prefix '{prefix}'"
            if spec is None
            else f"{spec.provider.value} does not support {capability.name}"
        )
        raise UnknownProviderError(
            f"Model {model} is not supported for {capability.name} ({reason}). "
            f"Supported formats are: {supported}."
        )

    config = expect_config(spec.config_type.from_env(model_name, source))
    client = spec.build(config)
    events.log(
        "provider_resolved",
        capability=capability.name,
        provider=spec.provider.value,
        model=model_name,
    )
    return client


def build_client(capability: Capability[ClientT], provider: Enum, config: Any) -> ClientT:
    """Instantiate an adapter from an explicit provider and config pair."""
    spec = capability.spec_for_provider(provider)
    if spec is None:
        raise UnsupportedProviderError(
            f"{provider!r} is not a {capability.name} provider"
        )
    if not spec.supported:
        raise _unsupported(capability, spec)
    if not isinstance(config, spec.config_type):
        raise ConfigurationError(
            f"{spec.provider.value} expects {spec.config_type.__name__}, "
            f"got {type(config).__name__}"
        )
    client = spec.build(config)
    events.log(
        "provider_resolved",
        level="debug",
        capability=capability.name,
        provider=spec.provider.value,
        model=getattr(config, "model", ""),
    )
    return client


def build_client_for_config(capability: Capability[ClientT], config: Any) -> ClientT:
    """Instantiate an adapter when the config type itself names the provider."""
    for spec in capability.specs:
        if spec.config_type is not None and isinstance(config, spec.config_type):
            return build_client(capability, spec.provider, config)
    raise ConfigurationError(
        f"{type(config).__name__} is not a {capability.name} provider config"
    )
