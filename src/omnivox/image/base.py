from __future__ import annotations

import abc

from ..result import (
    AuthenticationError,
    Err,
    Ok,
    RateLimitError,
    Result,
    ServiceError,
    ValidationError,
)
from .models import GeneratedImage, HealthStatus, ImageGenerationOptions, ServiceStatus


class ImageGenerationClient(abc.ABC):
    """Text-to-image generation against one backend."""

    @abc.abstractmethod
    def generate_image(
        self, prompt: str, options: ImageGenerationOptions | None = None
    ) -> Result[GeneratedImage]:
        """Generate a single image."""

    @abc.abstractmethod
    def health(self) -> Result[ServiceStatus]:
        """Report whether the backend is reachable and ready."""

    def generate_images(
        self, prompt: str, count: int, options: ImageGenerationOptions | None = None
    ) -> Result[list[GeneratedImage]]:
        """Generate ``count`` images, stopping at the first failure."""
        if count < 1:
            return Err(ValidationError("Image count must be at least 1"))
        images: list[GeneratedImage] = []
        for _ in range(count):
            result = self.generate_image(prompt, options)
            if result.is_err():
                return result
            images.append(result.unwrap())
        return Ok(images)


def reject_blank_prompt(prompt: str) -> Err | None:
    if not prompt or not prompt.strip():
        return Err(ValidationError("Prompt must not be empty"))
    return None


def status_from_probe(
    probe: Result[object], healthy_message: str
) -> Result[ServiceStatus]:
    """Turn a health-check request into a status report.

    Authentication failures stay errors; the service being unreachable or busy
    is a status, not a failure of the health call itself.
    """
    if probe.is_ok():
        return Ok(ServiceStatus(HealthStatus.HEALTHY, healthy_message))
    error = probe.error
    if isinstance(error, AuthenticationError):
        return probe
    if isinstance(error, RateLimitError) or (
        isinstance(error, ServiceError) and error.code == 503
    ):
        return Ok(ServiceStatus(HealthStatus.DEGRADED, error.message))
    return Ok(ServiceStatus(HealthStatus.UNHEALTHY, error.message))
