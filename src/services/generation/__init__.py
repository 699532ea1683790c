from .gemini import ContentProviderError, GeminiClient, parse_poem_json
from .poetry import (
    GenerationSettings,
    PoetryService,
    load_generation_settings,
    save_generated_poem,
)

__all__ = [
    "ContentProviderError",
    "GeminiClient",
    "parse_poem_json",
    "GenerationSettings",
    "PoetryService",
    "load_generation_settings",
    "save_generated_poem",
]
