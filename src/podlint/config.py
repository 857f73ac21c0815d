"""Configuration management for podlint using Pydantic models."""

import json
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_FILE_NAME = ".podlint.json"


class FailurePolicy(str, Enum):
    """How the engine collects violations."""
    COLLECT_ALL = "collect_all"
    FAIL_FAST = "fail_fast"


class OutputFormat(str, Enum):
    """Report output formats."""
    TEXT = "text"
    JSON = "json"
    MARKDOWN = "markdown"
    TABLE = "table"


class LogLevel(str, Enum):
    """Logging levels."""
    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"


class PolicyConfig(BaseModel):
    """Rule policy section."""
    failure_policy: FailurePolicy = Field(alias="failurePolicy", default=FailurePolicy.COLLECT_ALL)
    require_ports: bool = Field(alias="requirePorts", default=False)
    require_resources: bool = Field(alias="requireResources", default=True)
    enforce_name_format: bool = Field(alias="enforceNameFormat", default=True)

    model_config = ConfigDict(populate_by_name=True)


class SchemaConfig(BaseModel):
    """Accepted literal values for the supported manifest revision."""
    api_version: str = Field(alias="apiVersion", default="v1")
    kind: str = "Pod"
    allowed_os: list[str] = Field(alias="allowedOs", default_factory=lambda: ["linux", "windows"])
    allowed_protocols: list[str] = Field(alias="allowedProtocols", default_factory=lambda: ["TCP", "UDP"])
    image_registry: str = Field(alias="imageRegistry", default="registry.bigbrother.io")

    @field_validator("allowed_os", "allowed_protocols")
    @classmethod
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError("allowed value list must not be empty")
        return v

    @field_validator("image_registry")
    @classmethod
    def validate_registry(cls, v):
        """Registry is a bare host[:port], without scheme or trailing slash."""
        if not v or "/" in v:
            raise ValueError(f"image registry must be a bare host name, got: {v!r}")
        return v

    model_config = ConfigDict(populate_by_name=True)


class OutputConfig(BaseModel):
    """Output configuration section."""
    format: OutputFormat = OutputFormat.TEXT
    line_numbers: bool = Field(alias="lineNumbers", default=True)

    model_config = ConfigDict(populate_by_name=True)


class LoggingConfig(BaseModel):
    """Logging configuration section."""
    level: LogLevel = LogLevel.WARN


class PodlintConfig(BaseModel):
    """Complete podlint configuration model."""
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    # "schema" shadows a BaseModel attribute, hence the alias
    manifest_schema: SchemaConfig = Field(alias="schema", default_factory=SchemaConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


def load_config(config_path: str | Path | None = None) -> PodlintConfig:
    """Load configuration from file with fallback to defaults.

    Args:
        config_path: Optional path to configuration file. If None, searches
                    current directory and parents for .podlint.json

    Returns:
        PodlintConfig: Loaded and validated configuration

    Raises:
        ValueError: If configuration is invalid or an explicit path does not exist
    """
    if config_path is None:
        config_path = find_config_file()
    else:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ValueError(f"Config file not found: {config_path}")

    if config_path and config_path.exists():
        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
            return PodlintConfig(**config_data)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e
        except Exception as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}") from e

    return PodlintConfig()


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .podlint.json configuration file by searching up directory tree.

    Args:
        start_dir: Directory to start search from (default: current directory)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = Path(start_dir).resolve()

    while True:
        config_file = current / CONFIG_FILE_NAME
        if config_file.exists():
            return config_file

        parent = current.parent
        if parent == current:  # Reached root directory
            break
        current = parent

    return None
