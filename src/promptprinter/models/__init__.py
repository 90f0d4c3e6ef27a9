"""Pydantic data models for Prompt Printer."""

from promptprinter.models.analysis import AnalysisResult
from promptprinter.models.prompt_record import PromptRecord, INITIAL_VERSION

__all__ = [
    "AnalysisResult",
    "PromptRecord",
    "INITIAL_VERSION",
]
