"""Model adapter interface for prompt optimization.

This module defines the abstract contract shared by every AI backend:

1. ``check_availability`` - cheap probe, never raises, returns a bool
2. ``analyze`` - send the draft for structured rewriting, return an
   AnalysisResult or raise AnalysisFailed

Callers (the workflow controller) never see backend-specific exceptions.
"""

import json
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError as PydanticValidationError

from promptprinter.models.analysis import AnalysisResult
from promptprinter.services.exceptions import AnalysisFailed


_CODE_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence, if present."""
    match = _CODE_FENCE.match(text)
    if match:
        return match.group(1).strip()
    return text


def parse_analysis_response(text: str | None, backend: str | None = None) -> AnalysisResult:
    """Parse a backend's raw response text into an AnalysisResult.

    Args:
        text: Raw text returned by the backend (JSON object expected)
        backend: Backend identifier, attached to any raised error

    Returns:
        Parsed AnalysisResult

    Raises:
        AnalysisFailed: If the text is not JSON or lacks the required fields
    """
    raw = _strip_code_fence((text or "").strip())

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        preview = raw[:500] + "..." if len(raw) > 500 else raw
        raise AnalysisFailed(
            f"Model returned malformed JSON: {e}\n\nResponse preview:\n{preview}",
            backend=backend,
        ) from e

    if not isinstance(data, dict):
        raise AnalysisFailed(
            f"Model returned JSON {type(data).__name__}, expected an object",
            backend=backend,
        )

    if "changeLog" not in data:
        raise AnalysisFailed("Model response is missing changeLog", backend=backend)

    try:
        return AnalysisResult.model_validate(data)
    except PydanticValidationError as e:
        raise AnalysisFailed(
            f"Model response is missing optimizedPrompt/changeLog: {e}",
            backend=backend,
        ) from e


class ModelBackend(ABC):
    """Abstract interface for AI backends.

    Implementations hold only configuration; each call is independent and
    safe for the caller to retry.
    """

    name: str = "backend"

    @abstractmethod
    async def check_availability(self) -> bool:
        """Report whether the backend looks usable.

        Returns:
            True if the backend appears reachable/configured. Never raises.
        """
        pass

    @abstractmethod
    async def analyze(self, title: str, draft_text: str) -> AnalysisResult:
        """Send a draft for structured rewriting.

        Args:
            title: Prompt title
            draft_text: Prompt content to optimize

        Returns:
            Parsed AnalysisResult

        Raises:
            AnalysisFailed: On network, HTTP, or response-format errors
        """
        pass
