from .huggingface import HuggingFaceClient
from .stable_diffusion import StableDiffusionClient

__all__ = ["HuggingFaceClient", "StableDiffusionClient"]
