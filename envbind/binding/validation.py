"""
Validation Pass

Runs a compiled schema over its value bag, collecting every violation, and
turns pydantic errors into one EnvValidationError whose messages name
environment variables instead of schema keys.
"""

from typing import Any, Dict, Iterable, Optional

from pydantic import ValidationError

from envbind.binding.compiler import CompiledSchema
from envbind.utils.exceptions import EnvValidationError, ErrorDetail
from envbind.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SEPARATOR = '\n\t'
_INPUT_SHOULD = 'Input should '


def format_error_message(banner: str, messages: Iterable[str], separator: str = DEFAULT_SEPARATOR) -> str:
    """
    Combine violation messages under a banner.

    Each message is preceded by the separator, so with the default one every
    violation sits on its own tab-indented line.
    """
    return banner + ''.join(separator + message for message in messages)


def describe_error(label: str, error: Dict[str, Any]) -> str:
    """
    Phrase a pydantic error around a display label.

    Args:
        label: Environment variable name or explicit label
        error: One entry of ValidationError.errors()

    Returns:
        Message such as '"PORT" is required'
    """
    error_type = error['type']
    ctx = error.get('ctx') or {}
    msg = error.get('msg', '')

    if error_type == 'missing':
        return f'"{label}" is required'
    if error_type == 'string_too_short' and error.get('input') == '':
        return f'"{label}" is not allowed to be empty'
    if error_type == 'string_pattern_mismatch':
        return f'"{label}" with value "{error.get("input")}" fails to match the required pattern: /{ctx.get("pattern")}/'
    if error_type in ('value_error', 'assertion_error') and 'error' in ctx:
        return f'"{label}" {ctx["error"]}'
    if msg.startswith(_INPUT_SHOULD):
        return f'"{label}" must {msg[len(_INPUT_SHOULD):]}'
    return f'"{label}" {msg[:1].lower()}{msg[1:]}'


def _to_detail(compiled: CompiledSchema, error: Dict[str, Any]) -> ErrorDetail:
    label = compiled.label_for(error['loc'])
    ctx = {k: (v if isinstance(v, (str, int, float, bool)) or v is None else str(v))
           for k, v in (error.get('ctx') or {}).items()}
    return ErrorDetail(
        type=error['type'],
        message=describe_error(label, error),
        path=compiled.path_for(error['loc']),
        label=label,
        context=ctx,
    )


def validate_compiled(
    compiled: CompiledSchema,
    banner: str,
    separator: Optional[str] = None
) -> Any:
    """
    Validate a compiled schema.

    Args:
        compiled: Output of compile_schema()
        banner: First line of the combined error message
        separator: Placed before each violation, defaults to newline + tab

    Returns:
        The model instance for model schemas, otherwise a dict shaped like
        the schema

    Raises:
        EnvValidationError: With every violation, in declaration order
    """
    try:
        instance = compiled.model.model_validate(compiled.values)
    except ValidationError as e:
        details = [_to_detail(compiled, error) for error in e.errors()]
        message = format_error_message(
            banner,
            [detail.message for detail in details],
            DEFAULT_SEPARATOR if separator is None else separator
        )
        logger.warning(
            f"Environment validation failed with {len(details)} violation(s)",
            extra={'labels': [detail.label for detail in details]}
        )
        raise EnvValidationError(message, details) from e

    logger.debug(f"Environment validated: {len(compiled.labels)} field(s)")
    return compiled.to_output(instance)
