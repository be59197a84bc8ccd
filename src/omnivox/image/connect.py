"""
Image generation client factories driven by ``IMAGE_MODEL``
(``stable-diffusion/<checkpoint>`` or ``huggingface/<org>/<model>``).
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from ..dispatch import Capability, ProviderSpec, build_client, build_client_for_config, resolve_from_env
from ..result import Result
from .base import ImageGenerationClient
from .config import HuggingFaceConfig, ImageProviderConfig, StableDiffusionConfig
from .models import GeneratedImage, ImageGenerationOptions
from .providers import HuggingFaceClient, StableDiffusionClient

IMAGE_MODEL_VARIABLE = "IMAGE_MODEL"


class ImageGenerationProvider(str, Enum):
    STABLE_DIFFUSION = "stable-diffusion"
    HUGGINGFACE = "huggingface"


IMAGE = Capability[ImageGenerationClient](
    name="image generation",
    model_variable=IMAGE_MODEL_VARIABLE,
    specs=(
        ProviderSpec(
            ImageGenerationProvider.STABLE_DIFFUSION,
            "stable-diffusion",
            StableDiffusionConfig,
            StableDiffusionClient,
        ),
        ProviderSpec(
            ImageGenerationProvider.HUGGINGFACE,
            "huggingface",
            HuggingFaceConfig,
            HuggingFaceClient,
        ),
    ),
)


def get_client(env: Mapping[str, str] | None = None) -> ImageGenerationClient:
    """Build the client named by ``IMAGE_MODEL``."""
    return resolve_from_env(IMAGE, env)


def client(provider: ImageGenerationProvider, config: ImageProviderConfig) -> ImageGenerationClient:
    return build_client(IMAGE, provider, config)


def client_for(config: ImageProviderConfig) -> ImageGenerationClient:
    return build_client_for_config(IMAGE, config)


def generate_image(
    prompt: str,
    options: ImageGenerationOptions | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[GeneratedImage]:
    return get_client(env).generate_image(prompt, options)
