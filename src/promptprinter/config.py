"""Configuration management with lazy validation."""

from pathlib import Path
from functools import cached_property
from typing import Optional

from promptprinter.models.config import AIConfig, Config, StorageConfig, DEFAULT_CONFIG_PATH
from promptprinter.utils.logging import get_logger


logger = get_logger(__name__)


class ConfigManager:
    """
    Configuration manager with lazy validation.

    Loads the config file once and hands out validated sections on first
    access, so users only see errors for the sections they actually use.

    Example:
        >>> config_mgr = ConfigManager.load_default()
        >>> ai_config = config_mgr.ai
        >>> storage_config = config_mgr.storage
    """

    def __init__(self, config: Config, path: Optional[Path] = None):
        """
        Initialize config manager with loaded config.

        Args:
            config: Loaded and validated Config instance
            path: File the config came from (None when using defaults)
        """
        self._config = config
        self.path = path

    @classmethod
    def load_default(cls, allow_missing: bool = True) -> "ConfigManager":
        """
        Load configuration from ~/.config/promptprinter/config.yaml.

        Args:
            allow_missing: Fall back to built-in defaults when the file is absent

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist and allow_missing is False
            PermissionError: If config file has wrong permissions
            ValueError: If config is invalid
        """
        if allow_missing and not DEFAULT_CONFIG_PATH.exists():
            logger.info("config_defaults_used", path=str(DEFAULT_CONFIG_PATH))
            return cls(Config())
        return cls.load_from_path(DEFAULT_CONFIG_PATH)

    @classmethod
    def load_from_path(cls, path: Path) -> "ConfigManager":
        """
        Load configuration from specific path.

        Args:
            path: Path to config.yaml file

        Returns:
            ConfigManager instance with loaded config

        Raises:
            FileNotFoundError: If config file doesn't exist
            PermissionError: If config file has wrong permissions
            ValueError: If config is invalid
        """
        logger.info("config_loading", path=str(path))

        try:
            config = Config.load(path)
            logger.info("config_loaded", path=str(path))
            return cls(config, path=path)

        except FileNotFoundError as e:
            logger.error("config_not_found", path=str(path), error=str(e))
            raise

        except PermissionError as e:
            logger.error("config_permission_error", path=str(path), error=str(e))
            raise

        except Exception as e:
            logger.error("config_validation_error", path=str(path), error=str(e))
            raise ValueError(f"Configuration validation failed: {e}") from e

    @property
    def config(self) -> Config:
        """The full validated configuration."""
        return self._config

    @cached_property
    def ai(self) -> AIConfig:
        """
        Get AI backend configuration.

        Raises:
            ValueError: If AI config is invalid
        """
        try:
            return self._config.ai
        except Exception as e:
            logger.error("ai_config_invalid", error=str(e))
            raise ValueError(f"AI configuration invalid: {e}") from e

    @cached_property
    def storage(self) -> StorageConfig:
        """
        Get storage configuration.

        Raises:
            ValueError: If storage config is invalid
        """
        try:
            return self._config.storage
        except Exception as e:
            logger.error("storage_config_invalid", error=str(e))
            raise ValueError(f"Storage configuration invalid: {e}") from e
