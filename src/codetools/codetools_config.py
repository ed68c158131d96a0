"""Configuration for the code tools server."""

from dataclasses import dataclass, field
import json
import logging
from typing import Any, Dict


@dataclass
class CodeToolsLoggingSettings:
    """
    Logging settings.

    When an output file is configured, console output is forced on as well so that
    problems are visible while the server runs.
    """
    level: str = "INFO"
    output_file: str = "code-tools.log"
    max_size_mb: int = 10
    console: bool = False


@dataclass
class CodeToolsFilesystemSettings:
    """Filesystem tool settings."""
    root: str | None = None  # None means use the working directory
    default_list_limit: int = 0
    default_tree_limit: int = 0


@dataclass
class CodeToolsConfig:
    """Top-level server configuration."""
    logging: CodeToolsLoggingSettings = field(default_factory=CodeToolsLoggingSettings)
    filesystem: CodeToolsFilesystemSettings = field(default_factory=CodeToolsFilesystemSettings)

    @classmethod
    def create_default(cls) -> "CodeToolsConfig":
        """Create a new CodeToolsConfig object with default values."""
        config = cls()
        config.logging.console = True
        return config

    @classmethod
    def load(cls, path: str) -> "CodeToolsConfig":
        """
        Load configuration from file.

        Args:
            path: Path to the JSON configuration file

        Returns:
            CodeToolsConfig object with loaded values

        Raises:
            json.JSONDecodeError: If file contains invalid JSON
            OSError: If the file cannot be read
            ValueError: If a setting has the wrong type
        """
        config = cls()

        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError("Configuration must be a JSON object")

        logging_data = cls._section(data, "logging")
        config.logging.level = str(logging_data.get("level", config.logging.level)).upper()
        output_file = logging_data.get("output_file", config.logging.output_file)
        config.logging.output_file = str(output_file) if output_file is not None else ""
        config.logging.max_size_mb = cls._int_setting(logging_data, "max_size_mb", config.logging.max_size_mb)
        config.logging.console = bool(logging_data.get("console", config.logging.console))

        if config.logging.output_file:
            config.logging.console = True

        filesystem_data = cls._section(data, "filesystem")
        root = filesystem_data.get("root")
        config.filesystem.root = str(root) if root else None
        config.filesystem.default_list_limit = cls._int_setting(
            filesystem_data, "default_list_limit", config.filesystem.default_list_limit
        )
        config.filesystem.default_tree_limit = cls._int_setting(
            filesystem_data, "default_tree_limit", config.filesystem.default_tree_limit
        )

        return config

    @classmethod
    def load_or_default(cls, path: str | None) -> "CodeToolsConfig":
        """
        Load configuration, falling back to defaults if it is missing or invalid.

        Args:
            path: Path to the JSON configuration file, or None for defaults

        Returns:
            CodeToolsConfig object
        """
        if path is None:
            return cls.create_default()

        try:
            return cls.load(path)

        except FileNotFoundError:
            logging.getLogger("CodeToolsConfig").warning("Config file %s not found, using defaults", path)

        except (json.JSONDecodeError, OSError, ValueError) as e:
            logging.getLogger("CodeToolsConfig").warning(
                "Failed to load config file %s, using defaults: %s", path, str(e)
            )

        return cls.create_default()

    @staticmethod
    def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
        """Get a named object section of the configuration."""
        section = data.get(name, {})
        if not isinstance(section, dict):
            raise ValueError(f"'{name}' must be an object")

        return section

    @staticmethod
    def _int_setting(section: Dict[str, Any], key: str, default: int) -> int:
        """Get a non-negative integer setting."""
        value = section.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"'{key}' must be a non-negative integer")

        return value
