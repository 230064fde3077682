"""
Settings and Configuration Management

Pydantic models for the library's own behaviour: name resolution,
error message layout and logging.
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Any, Dict, List, Optional, Union
import yaml
import os
from pathlib import Path

from envbind.utils.exceptions import ConfigurationError
from envbind.utils.logger import setup_logging

CONFIG_PATH_ENV_VAR = 'ENVBIND_CONFIG'

PROBE_STRATEGIES = ('exact', 'upper', 'lower')


class ResolutionConfig(BaseModel):
    """Environment variable name resolution."""
    optional_marker: str = Field('?', min_length=1, max_length=1, description="Prefix marking an optional variable name")
    probe_order: List[str] = Field(
        default=['exact', 'upper', 'lower'],
        description="Key casings probed when no explicit name is given"
    )

    @field_validator('probe_order')
    @classmethod
    def validate_probe_order(cls, v):
        if not v:
            raise ValueError("probe_order must not be empty")
        unknown = [s for s in v if s not in PROBE_STRATEGIES]
        if unknown:
            raise ValueError(f"Unknown probe strategies: {unknown}. Must be among {list(PROBE_STRATEGIES)}")
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate probe strategies: {v}")
        return v


class MessagesConfig(BaseModel):
    """Aggregated error message layout."""
    missing_banner: str = Field('Some environment variables are missing:', description="Banner for schema binding errors")
    invalid_banner: str = Field('Invalid environment:', description="Banner for descriptor builder errors")
    separator: str = Field('\n\t', description="Separator placed before each violation")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field('WARNING', description="Log level")
    format: str = Field('text', description="Log format (json or text)")
    file: Optional[str] = Field(None, description="Log file path")
    console: bool = Field(False, description="Log to console")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        valid_formats = ['json', 'text']
        if v.lower() not in valid_formats:
            raise ValueError(f"Invalid log format: {v}. Must be one of {valid_formats}")
        return v.lower()


class Settings(BaseModel):
    """Main configuration settings."""
    resolution: ResolutionConfig = ResolutionConfig()
    messages: MessagesConfig = MessagesConfig()
    logging: LoggingConfig = LoggingConfig()
    dotenv_path: Optional[str] = Field(None, description="Optional .env file merged under the process environment")

    model_config = ConfigDict(validate_assignment=True)


def load_config(path: Optional[Union[str, Path]] = None, overrides: Optional[Dict[str, Any]] = None) -> Settings:
    """
    Load settings from a YAML file.

    The file only needs to list the values it changes; everything else keeps
    its default.

    Args:
        path: YAML file. Defaults to the file named by ENVBIND_CONFIG, or no
            file at all.
        overrides: Values merged over the file contents

    Returns:
        Validated Settings object

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV_VAR) or None

    config: Dict[str, Any] = {}
    if path is not None:
        config_file = Path(path)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")

        try:
            with open(config_file, encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML config {config_file}: {e}") from e

        if not isinstance(config, dict):
            raise ConfigurationError(f"Config root must be a mapping: {config_file}")

    if overrides:
        config = deep_merge(config, overrides)

    try:
        return Settings(**config)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid envbind configuration: {e}") from e


def deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override values

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


# Global config instance (lazy loaded)
_config: Optional[Settings] = None


def get_config() -> Settings:
    """
    Get global config instance (singleton pattern).

    Returns:
        Settings instance
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached settings so the next get_config() reloads them."""
    global _config
    _config = None


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Apply the logging section of the settings to the envbind logger tree.

    Args:
        settings: Settings to apply. Defaults to get_config().
    """
    settings = settings or get_config()
    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.file,
        format_type=settings.logging.format,
        console=settings.logging.console
    )
