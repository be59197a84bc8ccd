"""
Image backend configuration read from the environment.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..env import TIMEOUT_VARIABLE, EnvSource
from ..result import Ok, Result

STABLE_DIFFUSION_BASE_URL = "http://localhost:7860"
HUGGINGFACE_BASE_URL = "https://api-inference.huggingface.co/models"
HUGGINGFACE_DEFAULT_MODEL = "stabilityai/stable-diffusion-2-1"

# Applies unless OMNIVOX_TIMEOUT_MS is set.
IMAGE_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class StableDiffusionConfig:
    """AUTOMATIC1111 web UI API. ``model`` selects a checkpoint when set."""

    base_url: str = STABLE_DIFFUSION_BASE_URL
    api_key: str | None = None
    model: str = ""
    timeout: float = IMAGE_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["StableDiffusionConfig"]:
        return Ok(
            cls(
                base_url=env.get_or("STABLE_DIFFUSION_BASE_URL", STABLE_DIFFUSION_BASE_URL).rstrip("/"),
                api_key=env.get("STABLE_DIFFUSION_API_KEY"),
                model=model_name,
                timeout=_timeout(env),
            )
        )


@dataclass(frozen=True)
class HuggingFaceConfig:
    api_key: str
    model: str = HUGGINGFACE_DEFAULT_MODEL
    base_url: str = HUGGINGFACE_BASE_URL
    timeout: float = IMAGE_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, model_name: str, env: EnvSource) -> Result["HuggingFaceConfig"]:
        return env.require("HF_TOKEN", "required when using huggingface/ model.").bind(
            lambda api_key: Ok(
                cls(
                    api_key=api_key,
                    model=model_name or HUGGINGFACE_DEFAULT_MODEL,
                    base_url=env.get_or("HUGGINGFACE_BASE_URL", HUGGINGFACE_BASE_URL).rstrip("/"),
                    timeout=_timeout(env),
                )
            )
        )


def _timeout(env: EnvSource) -> float:
    if env.get(TIMEOUT_VARIABLE):
        return env.timeout_seconds()
    return IMAGE_TIMEOUT_SECONDS


ImageProviderConfig = StableDiffusionConfig | HuggingFaceConfig
