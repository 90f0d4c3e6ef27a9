"""AI backend variants and the factory that selects one."""

from typing import Optional

from promptprinter.llm.client import ModelBackend
from promptprinter.llm.providers.gemini import GeminiBackend
from promptprinter.llm.providers.openai_compat import OpenAICompatBackend
from promptprinter.models.config import AIBackend, AIConfig


def create_backend(ai_config: AIConfig, backend: Optional[AIBackend] = None) -> ModelBackend:
    """Build the backend variant selected by configuration.

    Args:
        ai_config: AI configuration section
        backend: Override for ``ai_config.backend`` (used by the in-app switcher)

    Returns:
        ModelBackend implementation

    Raises:
        ValueError: If the selected backend has no settings section
    """
    kind = backend or ai_config.backend

    if kind == AIBackend.GEMINI:
        return GeminiBackend(ai_config.gemini, ai_config.output_language)

    if kind == AIBackend.OPENAI_COMPAT:
        if ai_config.openai_compat is None:
            raise ValueError("ai.openai_compat section is required for the openai_compat backend")
        return OpenAICompatBackend(ai_config.openai_compat, ai_config.output_language)

    raise ValueError(f"Unknown AI backend: {kind}")


__all__ = [
    "GeminiBackend",
    "OpenAICompatBackend",
    "create_backend",
]
