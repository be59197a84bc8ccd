"""
Image generation options and results.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from ..result import Err, Ok, Result, SaveFailed

logger = logging.getLogger(__name__)


class ImageSize(Enum):
    SQUARE_512 = (512, 512)
    SQUARE_1024 = (1024, 1024)
    LANDSCAPE_768x512 = (768, 512)
    PORTRAIT_512x768 = (512, 768)

    @property
    def width(self) -> int:
        return self.value[0]

    @property
    def height(self) -> int:
        return self.value[1]

    @property
    def description(self) -> str:
        return f"{self.width}x{self.height}"

    @classmethod
    def parse(cls, text: str) -> "ImageSize":
        """Look a size up by its ``WIDTHxHEIGHT`` description."""
        for size in cls:
            if size.description == text:
                return size
        choices = ", ".join(size.description for size in cls)
        raise ValueError(f"Unsupported image size {text!r}; choose one of {choices}")


class ImageFormat(Enum):
    PNG = ("png", "image/png")
    JPEG = ("jpg", "image/jpeg")

    @property
    def extension(self) -> str:
        return self.value[0]

    @property
    def mime_type(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class ImageGenerationOptions:
    size: ImageSize = ImageSize.SQUARE_512
    format: ImageFormat = ImageFormat.PNG
    seed: int | None = None
    guidance_scale: float = 7.5
    inference_steps: int = 20
    negative_prompt: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class GeneratedImage:
    data_b64: str
    format: ImageFormat
    size: ImageSize
    prompt: str
    created_at: datetime = field(default_factory=_now)
    seed: int | None = None
    file_path: Path | None = None

    def as_bytes(self) -> bytes:
        return base64.b64decode(self.data_b64)

    def save_to_file(self, path: str | Path) -> Result["GeneratedImage"]:
        """Write the decoded image and return a copy that remembers the path."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self.as_bytes())
        except (OSError, binascii.Error, ValueError) as exc:
            logger.warning("Failed to save image to %s: %s", target, exc)
            return Err(SaveFailed(str(exc) or "Failed to save image", context={"path": str(target)}))
        return Ok(replace(self, file_path=target))


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass(frozen=True)
class ServiceStatus:
    status: HealthStatus
    message: str
    last_checked: datetime = field(default_factory=_now)
    queue_length: int | None = None
    average_generation_ms: int | None = None
