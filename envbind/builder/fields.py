"""
Field Validators

Typed validators for the descriptor dialect: coercion of raw strings to
string, number or boolean, plus required/default/trim/valid handling.
"""

import math
from typing import Any, Callable, Dict

from envbind.schema.nodes import DescriptorLeaf

MISSING = object()

_BOOLEANS = {'true': True, 'false': False}


class FieldError(Exception):
    """A single field failed validation."""

    def __init__(self, type: str, message: str):
        super().__init__(message)
        self.type = type
        self.message = message


def coerce_string(label: str, value: str) -> str:
    return value


def coerce_number(label: str, value: str):
    """Integer literals become int, other finite decimals become float."""
    text = value.strip()
    # int() and float() accept digit separators, which env values should not use
    if text and '_' not in text:
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            pass
        else:
            if math.isfinite(number):
                return number
    raise FieldError('number_parsing', f'"{label}" must be a number')


def coerce_boolean(label: str, value: str) -> bool:
    try:
        return _BOOLEANS[value.strip().lower()]
    except KeyError:
        raise FieldError('bool_parsing', f'"{label}" must be a boolean') from None


COERCERS: Dict[str, Callable[[str, str], Any]] = {
    'string': coerce_string,
    'number': coerce_number,
    'boolean': coerce_boolean,
}


def _format_allowed(values) -> str:
    return '[' + ', '.join(str(v) for v in values) + ']'


def _is_allowed(value: Any, allowed) -> bool:
    # bool is an int subclass; True must not match 1
    return any(
        isinstance(candidate, bool) == isinstance(value, bool) and candidate == value
        for candidate in allowed
    )


class FieldValidator:
    """
    Validates one descriptor field.

    Absent values take the default when there is one, are None for optional
    fields and fail for required ones. Present values are never replaced by
    the default.
    """

    def __init__(self, leaf: DescriptorLeaf):
        self.leaf = leaf
        self.label = leaf.env
        self._coerce = COERCERS[leaf.type]

    def validate(self, raw: Any = MISSING) -> Any:
        """
        Validate a raw value.

        Args:
            raw: Environment value, or MISSING when the variable is unset

        Returns:
            Coerced value

        Raises:
            FieldError: If the value is missing, malformed or not allowed
        """
        leaf = self.leaf

        if raw is MISSING:
            if leaf.has_default:
                return leaf.default
            if leaf.required:
                raise FieldError('missing', f'"{self.label}" is required')
            return None

        value = raw.strip() if leaf.trim else raw
        value = self._coerce(self.label, value)

        if leaf.valid is not None and not _is_allowed(value, leaf.valid):
            raise FieldError('not_allowed', f'"{self.label}" must be one of {_format_allowed(leaf.valid)}')

        return value
