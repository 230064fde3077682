"""
envbind

Map environment variables onto typed, validated configuration objects.

Two schema dialects are available:
    - load_env(): pydantic models and annotations, or a mapping shorthand of
      variable names ('NAME', '?NAME'), compiled patterns and nested mappings.
      Field names are matched to variables as-is, upper-cased or lower-cased.
    - build_env(): descriptor mappings ({'env': 'NAME', 'type': 'number', ...})
      validated without pydantic.

Both report every invalid variable at once in a single EnvValidationError.
"""

from envbind.binding import load_env, resolve_name
from envbind.builder import build_env
from envbind.config import Settings, configure_logging, get_config, load_config
from envbind.environment import snapshot_environment
from envbind.utils.exceptions import (
    ConfigurationError,
    EnvSchemaError,
    EnvValidationError,
    ErrorDetail,
    SchemaDefinitionError,
    SchemaInferenceError,
)

__all__ = [
    'load_env',
    'build_env',
    'resolve_name',
    'snapshot_environment',
    'Settings',
    'configure_logging',
    'get_config',
    'load_config',
    'ConfigurationError',
    'EnvSchemaError',
    'EnvValidationError',
    'ErrorDetail',
    'SchemaDefinitionError',
    'SchemaInferenceError',
]

__version__ = '0.1.0'
