"""Intent-based configuration through a text-generation model."""
from .gemini import GeminiClient, GeminiError, generate_config

__all__ = ["GeminiClient", "GeminiError", "generate_config"]
