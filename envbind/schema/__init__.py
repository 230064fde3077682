"""
Schema Module

Schema node variants and pydantic schema introspection.
"""

from envbind.schema.describe import SchemaDescription, describe, describe_children, describe_field
from envbind.schema.nodes import (
    DescriptorLeaf,
    ExternalSchemaNode,
    NamedLeaf,
    ObjectNode,
    OptionalNamedLeaf,
    PatternLeaf,
    SchemaNode,
    parse_descriptor_node,
    parse_node,
)

__all__ = [
    'SchemaDescription',
    'describe',
    'describe_children',
    'describe_field',
    'DescriptorLeaf',
    'ExternalSchemaNode',
    'NamedLeaf',
    'ObjectNode',
    'OptionalNamedLeaf',
    'PatternLeaf',
    'SchemaNode',
    'parse_descriptor_node',
    'parse_node',
]
