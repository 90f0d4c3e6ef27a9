"""Configuration models for Prompt Printer."""

from enum import Enum
from pydantic import BaseModel, Field, HttpUrl, model_validator
from pathlib import Path
from typing import Optional
import yaml
import os
import stat


DEFAULT_CONFIG_PATH = Path.home() / ".config" / "promptprinter" / "config.yaml"


class AIBackend(str, Enum):
    """Available AI backend variants."""

    GEMINI = "gemini"
    OPENAI_COMPAT = "openai_compat"


class StorageBackend(str, Enum):
    """Available storage collaborators."""

    FILE = "file"
    SUPABASE = "supabase"
    MEMORY = "memory"


class GeminiConfig(BaseModel):
    """Configuration for the managed Gemini API."""

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (falls back to $GEMINI_API_KEY when unset)"
    )

    model: str = Field(
        default="gemini-3-flash-preview",
        description="Gemini model identifier"
    )

    def resolve_api_key(self) -> Optional[str]:
        """Return the configured key, or the GEMINI_API_KEY environment variable."""
        return self.api_key or os.environ.get("GEMINI_API_KEY") or None

    model_config = {"frozen": True}


class OpenAICompatConfig(BaseModel):
    """Configuration for an OpenAI-compatible chat completions endpoint."""

    endpoint: HttpUrl = Field(
        ...,
        description="API base URL (e.g. https://dashscope.aliyuncs.com/compatible-mode/v1)"
    )

    api_key: str = Field(
        ...,
        description="API key for bearer authentication"
    )

    model: str = Field(
        ...,
        description="Model identifier (e.g. 'qwen-plus')"
    )

    probe_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Timeout in seconds for the model-listing availability probe"
    )

    request_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Timeout in seconds for analysis requests"
    )

    model_config = {"frozen": True}


class AIConfig(BaseModel):
    """AI backend selection and per-backend settings."""

    backend: AIBackend = Field(
        default=AIBackend.GEMINI,
        description="Which backend variant analysis requests go to"
    )

    output_language: str = Field(
        default="Simplified Chinese (简体中文)",
        min_length=1,
        description="Language the optimized prompt and change log must be written in"
    )

    gemini: GeminiConfig = Field(
        default_factory=GeminiConfig,
        description="Gemini settings"
    )

    openai_compat: Optional[OpenAICompatConfig] = Field(
        default=None,
        description="OpenAI-compatible endpoint settings"
    )

    @model_validator(mode="after")
    def validate_selected_backend(self) -> "AIConfig":
        """The selected backend must have its settings section."""
        if self.backend == AIBackend.OPENAI_COMPAT and self.openai_compat is None:
            raise ValueError(
                "ai.backend is 'openai_compat' but the ai.openai_compat section is missing"
            )
        return self

    model_config = {"frozen": True}


class FileStoreConfig(BaseModel):
    """Configuration for the local JSON file store."""

    path: str = Field(
        default="~/.local/share/promptprinter/prompts.json",
        description="Path to the JSON file holding all prompt records"
    )

    def resolve_path(self) -> Path:
        """Return the store path with ~ expanded."""
        return Path(self.path).expanduser()

    model_config = {"frozen": True}


class SupabaseConfig(BaseModel):
    """Configuration for a Supabase (PostgREST) table."""

    url: HttpUrl = Field(
        ...,
        description="Supabase project URL"
    )

    key: str = Field(
        ...,
        description="Supabase API key (anon/publishable key)"
    )

    table: str = Field(
        default="prompts",
        pattern=r"^[A-Za-z_][A-Za-z0-9_]*$",
        description="Table holding prompt records"
    )

    timeout: float = Field(
        default=10.0,
        gt=0,
        description="HTTP timeout in seconds"
    )

    model_config = {"frozen": True}


class StorageConfig(BaseModel):
    """Storage collaborator selection."""

    backend: StorageBackend = Field(
        default=StorageBackend.FILE,
        description="Which storage collaborator to use"
    )

    file: FileStoreConfig = Field(
        default_factory=FileStoreConfig,
        description="Local JSON file settings"
    )

    supabase: Optional[SupabaseConfig] = Field(
        default=None,
        description="Supabase settings"
    )

    @model_validator(mode="after")
    def validate_selected_backend(self) -> "StorageConfig":
        """The selected storage backend must have its settings section."""
        if self.backend == StorageBackend.SUPABASE and self.supabase is None:
            raise ValueError(
                "storage.backend is 'supabase' but the storage.supabase section is missing"
            )
        return self

    model_config = {"frozen": True}


class Config(BaseModel):
    """Root configuration for Prompt Printer."""

    ai: AIConfig = Field(default_factory=AIConfig, description="AI backend settings")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Storage settings")

    @classmethod
    def load(cls, path: Path) -> "Config":
        """
        Load configuration from YAML file.

        Validates file permissions before loading.
        Raises PermissionError if file is group/world readable.

        Args:
            path: Path to config.yaml file

        Returns:
            Validated Config instance

        Raises:
            PermissionError: If file permissions are too open
            FileNotFoundError: If config file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found at {path}\n\n"
                f"Please create the file with the following format:\n\n"
                f"ai:\n"
                f"  backend: openai_compat\n"
                f"  openai_compat:\n"
                f"    endpoint: https://dashscope.aliyuncs.com/compatible-mode/v1\n"
                f"    api_key: YOUR_API_KEY_HERE\n"
                f"    model: qwen-plus\n\n"
                f"storage:\n"
                f"  backend: file\n"
            )

        # Credentials live in this file, so it must be 600
        mode = os.stat(path).st_mode
        if mode & (stat.S_IRWXG | stat.S_IRWXO):
            raise PermissionError(
                f"Config file has overly permissive permissions: {oct(mode)}\n"
                f"Run: chmod 600 {path}"
            )

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a YAML mapping: {path}")

        return cls(**data)

    model_config = {"frozen": True}
