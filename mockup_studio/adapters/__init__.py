"""Adapters for remote generation backends."""

from mockup_studio.adapters.base import GenerationClient
from mockup_studio.adapters.gemini_adapter import GeminiAdapter
from mockup_studio.adapters.seedream_adapter import SeedreamAdapter

__all__ = [
    "GenerationClient",
    "GeminiAdapter",
    "SeedreamAdapter",
]
