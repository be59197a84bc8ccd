"""
Hugging Face Inference API text-to-image adapter.

The API answers with the raw image bytes. A model that is still being loaded
on the hosted side answers 503, which surfaces as ``ServiceError(code=503)``.
"""

from __future__ import annotations

import base64
from typing import Any

import requests

from ...result import Result
from ...transport import HttpTransport
from ..base import ImageGenerationClient, reject_blank_prompt, status_from_probe
from ..config import HuggingFaceConfig
from ..models import GeneratedImage, ImageGenerationOptions, ServiceStatus


class HuggingFaceClient(ImageGenerationClient):
    def __init__(
        self, config: HuggingFaceConfig, *, session: requests.Session | None = None
    ) -> None:
        self.config = config
        self._transport = HttpTransport(
            session=session,
            timeout=config.timeout,
            headers={"Authorization": f"Bearer {config.api_key}"},
        )

    @property
    def url(self) -> str:
        return f"{self.config.base_url}/{self.config.model}"

    def generate_image(
        self, prompt: str, options: ImageGenerationOptions | None = None
    ) -> Result[GeneratedImage]:
        rejected = reject_blank_prompt(prompt)
        if rejected is not None:
            return rejected

        opts = options or ImageGenerationOptions()
        return self._transport.post(
            self.url,
            json=self.build_payload(prompt, opts),
            headers={"Accept": opts.format.mime_type},
        ).map(
            lambda response: GeneratedImage(
                data_b64=base64.b64encode(response.content).decode("ascii"),
                format=opts.format,
                size=opts.size,
                prompt=prompt,
                seed=opts.seed,
            )
        )

    def health(self) -> Result[ServiceStatus]:
        return status_from_probe(
            self._transport.get(self.url),
            f"Hugging Face model {self.config.model} is available",
        )

    def build_payload(self, prompt: str, options: ImageGenerationOptions) -> dict[str, Any]:
        parameters: dict[str, Any] = {
            "width": options.size.width,
            "height": options.size.height,
            "guidance_scale": options.guidance_scale,
            "num_inference_steps": options.inference_steps,
        }
        if options.negative_prompt:
            parameters["negative_prompt"] = options.negative_prompt
        if options.seed is not None:
            parameters["seed"] = options.seed
        return {"inputs": prompt, "parameters": parameters}

    def close(self) -> None:
        self._transport.close()
