"""
Utility Modules

Common utilities for envbind.

Modules:
    - logger: Structured logging setup
    - exceptions: Custom exception types
"""

from envbind.utils.logger import get_logger, setup_logging, log_with_context
from envbind.utils.exceptions import (
    ConfigurationError,
    EnvSchemaError,
    EnvValidationError,
    ErrorDetail,
    SchemaDefinitionError,
    SchemaInferenceError,
)

__all__ = [
    'get_logger',
    'setup_logging',
    'log_with_context',
    'ConfigurationError',
    'EnvSchemaError',
    'EnvValidationError',
    'ErrorDetail',
    'SchemaDefinitionError',
    'SchemaInferenceError',
]
