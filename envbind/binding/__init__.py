"""
Schema Binding

Binds pydantic schemas and the mapping shorthand to environment variables.

Example:
    >>> from typing import Annotated
    >>> from pydantic import Field
    >>> config = load_env({
    ...     'db_url': 'DATABASE_URL',
    ...     'debug': '?DEBUG',
    ...     'port': Annotated[int, Field(alias='PORT')],
    ... })
"""

from typing import Any, Mapping, Optional

from envbind.binding.compiler import CompiledSchema, SchemaCompiler, compile_schema
from envbind.binding.resolver import ResolvedName, candidate_names, resolve_name
from envbind.binding.validation import describe_error, format_error_message, validate_compiled
from envbind.config.settings import Settings, get_config
from envbind.environment import snapshot_environment


def load_env(
    schema: Any,
    environ: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None
) -> Any:
    """
    Load and validate environment variables described by a schema.

    Args:
        schema: pydantic model class, mapping schema, or an annotation tagged
            with an alias
        environ: Environment to read. Defaults to os.environ.
        settings: Library settings, defaults to get_config()

    Returns:
        Model instance for model schemas, dict otherwise

    Raises:
        SchemaInferenceError: If a variable name cannot be determined
        SchemaDefinitionError: If the schema is malformed
        EnvValidationError: If any variable is missing or invalid
    """
    settings = settings or get_config()
    snapshot = snapshot_environment(environ, settings.dotenv_path)
    compiled = compile_schema(schema, snapshot, settings)
    return validate_compiled(compiled, settings.messages.missing_banner, settings.messages.separator)


__all__ = [
    'CompiledSchema',
    'ResolvedName',
    'SchemaCompiler',
    'candidate_names',
    'compile_schema',
    'describe_error',
    'format_error_message',
    'load_env',
    'resolve_name',
    'validate_compiled',
]
