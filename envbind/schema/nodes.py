"""
Schema Nodes

Both schema dialects are parsed into the same tagged node types before any
environment lookup happens:

    NamedLeaf           "NAME"              required string
    OptionalNamedLeaf   "?NAME"             optional string, empty means unset
    PatternLeaf         re.compile(...)     name inferred from the key
    DescriptorLeaf      {"env": "NAME", ...} builder options
    ObjectNode          {key: child, ...}   nesting
    ExternalSchemaNode  pydantic schema     models, annotations, Field(...)
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Pattern, Tuple, Union

from envbind.schema.describe import SchemaDescription, describe, is_pydantic_schema
from envbind.utils.exceptions import SchemaDefinitionError

FIELD_TYPES = ('string', 'number', 'boolean')
DESCRIPTOR_KEYS = frozenset({'env', 'type', 'required', 'optional', 'trim', 'default', 'valid'})


@dataclass(frozen=True)
class NamedLeaf:
    name: str


@dataclass(frozen=True)
class OptionalNamedLeaf:
    name: str


@dataclass(frozen=True)
class PatternLeaf:
    pattern: Pattern


@dataclass(frozen=True)
class DescriptorLeaf:
    """A field of the descriptor dialect."""
    env: str
    type: str = 'string'
    required: bool = True
    trim: bool = False
    has_default: bool = False
    default: Any = None
    valid: Optional[Tuple[Any, ...]] = None


@dataclass(frozen=True)
class ObjectNode:
    children: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExternalSchemaNode:
    description: SchemaDescription


SchemaNode = Union[NamedLeaf, OptionalNamedLeaf, PatternLeaf, DescriptorLeaf, ObjectNode, ExternalSchemaNode]


def _require_name(name: str, raw: Any) -> str:
    if not name:
        raise SchemaDefinitionError(f"Empty environment variable name in schema value {raw!r}")
    return name


def parse_node(value: Any, optional_marker: str = '?') -> SchemaNode:
    """
    Parse a value of the inference dialect.

    Args:
        value: String, compiled pattern, mapping or pydantic schema
        optional_marker: Prefix that makes a string leaf optional

    Returns:
        SchemaNode

    Raises:
        SchemaDefinitionError: For values no variant accepts
    """
    if isinstance(value, str):
        if optional_marker and value.startswith(optional_marker):
            return OptionalNamedLeaf(_require_name(value[len(optional_marker):], value))
        return NamedLeaf(_require_name(value, value))

    if isinstance(value, re.Pattern):
        return PatternLeaf(value)

    if isinstance(value, Mapping):
        return ObjectNode({str(k): parse_node(v, optional_marker) for k, v in value.items()})

    if is_pydantic_schema(value):
        return ExternalSchemaNode(describe(value))

    raise SchemaDefinitionError(f"Unsupported schema value: {value!r}")


def parse_descriptor(value: Mapping[str, Any]) -> DescriptorLeaf:
    """
    Build a DescriptorLeaf from its mapping form.

    A default makes the field optional; so do `required: False` and
    `optional: True`.
    """
    unknown = set(value) - DESCRIPTOR_KEYS
    if unknown:
        raise SchemaDefinitionError(f"Unknown descriptor options {sorted(unknown)} for {value.get('env')!r}")

    env = value['env']
    if not isinstance(env, str) or not env:
        raise SchemaDefinitionError(f"Descriptor 'env' must be a non-empty string, got {env!r}")

    field_type = value.get('type', 'string')
    if field_type not in FIELD_TYPES:
        raise SchemaDefinitionError(f"Unsupported type {field_type!r} for {env!r}. Must be one of {list(FIELD_TYPES)}")

    valid = value.get('valid')
    if valid is not None:
        if isinstance(valid, (str, bytes)) or not hasattr(valid, '__iter__'):
            raise SchemaDefinitionError(f"'valid' for {env!r} must be a collection of allowed values")
        valid = tuple(valid)

    has_default = 'default' in value
    required = bool(value.get('required', True)) and not value.get('optional', False) and not has_default

    return DescriptorLeaf(
        env=env,
        type=field_type,
        required=required,
        trim=bool(value.get('trim', False)),
        has_default=has_default,
        default=value.get('default'),
        valid=valid,
    )


def parse_descriptor_node(value: Any) -> SchemaNode:
    """
    Parse a value of the descriptor dialect.

    Mappings with a string `env` key are descriptors; other mappings nest.
    """
    if isinstance(value, str):
        return NamedLeaf(_require_name(value, value))

    if isinstance(value, Mapping):
        if isinstance(value.get('env'), str):
            return parse_descriptor(value)
        return ObjectNode({str(k): parse_descriptor_node(v) for k, v in value.items()})

    raise SchemaDefinitionError(f"Unsupported schema value: {value!r}")
