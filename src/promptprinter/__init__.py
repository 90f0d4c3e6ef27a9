"""Prompt Printer: draft, AI-optimize and version text prompts from the terminal."""

__version__ = "0.1.0"
