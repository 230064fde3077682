"""
Custom Exception Types

Specific exceptions for schema, binding and validation failures.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple


@dataclass(frozen=True)
class ErrorDetail:
    """A single violation reported by a validation pass."""
    type: str
    message: str
    path: Tuple[Any, ...] = ()
    label: Optional[str] = None
    context: dict = field(default_factory=dict)


class EnvSchemaError(Exception):
    """Base exception for envbind."""
    pass


class SchemaInferenceError(EnvSchemaError):
    """No environment variable name can be determined for a schema."""
    pass


class SchemaDefinitionError(EnvSchemaError):
    """The schema itself is malformed."""
    pass


class ConfigurationError(EnvSchemaError):
    """Invalid library settings."""
    pass


class EnvValidationError(EnvSchemaError):
    """
    One or more environment variables failed validation.

    The message lists every violation; `details` keeps one entry per
    violation for programmatic inspection.
    """

    def __init__(self, message: str, details: Optional[List[ErrorDetail]] = None):
        super().__init__(message)
        self.message = message
        self.details: List[ErrorDetail] = list(details or [])

    def __str__(self) -> str:
        return self.message
