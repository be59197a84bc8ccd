"""
Stable Diffusion through the AUTOMATIC1111 web UI API (``--api`` flag).
"""

from __future__ import annotations

import json
import logging
from typing import Any

import requests

from ...result import Err, Ok, Result, UnknownError, ValidationError
from ...transport import HttpTransport
from ..base import ImageGenerationClient, reject_blank_prompt, status_from_probe
from ..config import StableDiffusionConfig
from ..models import GeneratedImage, ImageGenerationOptions, ServiceStatus

logger = logging.getLogger(__name__)


class StableDiffusionClient(ImageGenerationClient):
    def __init__(
        self, config: StableDiffusionConfig, *, session: requests.Session | None = None
    ) -> None:
        self.config = config
        headers = {"Authorization": f"Bearer {config.api_key}"} if config.api_key else {}
        self._transport = HttpTransport(session=session, timeout=config.timeout, headers=headers)

    def generate_image(
        self, prompt: str, options: ImageGenerationOptions | None = None
    ) -> Result[GeneratedImage]:
        return self.generate_images(prompt, 1, options).map(lambda images: images[0])

    def generate_images(
        self, prompt: str, count: int, options: ImageGenerationOptions | None = None
    ) -> Result[list[GeneratedImage]]:
        """One txt2img call with ``batch_size=count``."""
        rejected = reject_blank_prompt(prompt)
        if rejected is not None:
            return rejected
        if count < 1:
            return Err(ValidationError("Image count must be at least 1"))

        opts = options or ImageGenerationOptions()
        return self._transport.post(
            f"{self.config.base_url}/sdapi/v1/txt2img",
            json=self.build_payload(prompt, count, opts),
        ).bind(lambda response: self._parse(response, prompt, opts))

    def health(self) -> Result[ServiceStatus]:
        return status_from_probe(
            self._transport.get(f"{self.config.base_url}/sdapi/v1/options"),
            "Stable Diffusion service is running",
        )

    def build_payload(
        self, prompt: str, count: int, options: ImageGenerationOptions
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "prompt": prompt,
            "negative_prompt": options.negative_prompt or "",
            "width": options.size.width,
            "height": options.size.height,
            "steps": options.inference_steps,
            "cfg_scale": options.guidance_scale,
            "seed": options.seed if options.seed is not None else -1,
            "batch_size": count,
            "n_iter": 1,
        }
        if self.config.model:
            payload["override_settings"] = {"sd_model_checkpoint": self.config.model}
        return payload

    def _parse(
        self, response: requests.Response, prompt: str, options: ImageGenerationOptions
    ) -> Result[list[GeneratedImage]]:
        try:
            body = response.json()
            images = body["images"]
            if not images:
                return Err(UnknownError(ValueError("No images in response")))
            seed = _seed_from_info(body.get("info"), options.seed)
            return Ok(
                [
                    GeneratedImage(
                        data_b64=data,
                        format=options.format,
                        size=options.size,
                        prompt=prompt,
                        seed=None if seed is None else seed + index,
                    )
                    for index, data in enumerate(images)
                ]
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Unexpected txt2img payload: %s", exc)
            return Err(UnknownError(exc))

    def close(self) -> None:
        self._transport.close()


def _seed_from_info(info: Any, requested: int | None) -> int | None:
    # ``info`` is a JSON document serialised into a string.
    if isinstance(info, str):
        try:
            info = json.loads(info)
        except ValueError:
            return requested
    if isinstance(info, dict) and isinstance(info.get("seed"), int):
        return info["seed"]
    return requested
