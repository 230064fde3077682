"""
Descriptor Builder

Self-contained validation of the `{'env': ..., 'type': ...}` descriptor dialect.
"""

from envbind.builder.builder import EnvBuilder, build_env
from envbind.builder.fields import FieldError, FieldValidator, coerce_boolean, coerce_number

__all__ = ['EnvBuilder', 'build_env', 'FieldError', 'FieldValidator', 'coerce_boolean', 'coerce_number']
