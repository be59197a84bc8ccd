from .base import ImageGenerationClient
from .config import HuggingFaceConfig, ImageProviderConfig, StableDiffusionConfig
from .connect import ImageGenerationProvider, client, client_for, generate_image, get_client
from .models import (
    GeneratedImage,
    HealthStatus,
    ImageFormat,
    ImageGenerationOptions,
    ImageSize,
    ServiceStatus,
)

__all__ = [
    "GeneratedImage",
    "HealthStatus",
    "HuggingFaceConfig",
    "ImageFormat",
    "ImageGenerationClient",
    "ImageGenerationOptions",
    "ImageGenerationProvider",
    "ImageProviderConfig",
    "ImageSize",
    "ServiceStatus",
    "StableDiffusionConfig",
    "client",
    "client_for",
    "generate_image",
    "get_client",
]
