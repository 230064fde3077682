"""
Unit Tests for Schema Nodes and Description

Tests for parsing both schema dialects and introspecting pydantic schemas.
"""

import re
from typing import Annotated, Optional

import pytest
from pydantic import AliasChoices, BaseModel, Field

from envbind.schema import (
    DescriptorLeaf,
    ExternalSchemaNode,
    NamedLeaf,
    ObjectNode,
    OptionalNamedLeaf,
    PatternLeaf,
    describe,
    describe_children,
    parse_descriptor_node,
    parse_node,
)
from envbind.utils.exceptions import SchemaDefinitionError


class Database(BaseModel):
    url: Annotated[str, Field(alias='DATABASE_URL', title='database url')]
    pool_size: int = 5


class TestDescribe:
    """Test pydantic schema introspection."""

    def test_alias_is_tag(self):
        description = describe(Annotated[int, Field(alias='PORT')])

        assert description.tag == 'PORT'
        assert description.label is None
        assert description.annotation is int
        assert description.required
        assert not description.is_object

    def test_title_is_label(self):
        assert describe(Annotated[str, Field(title='banana')]).label == 'banana'

    def test_validation_alias_wins(self):
        description = describe(Annotated[str, Field(alias='A', validation_alias='B')])
        assert description.tag == 'B'
        assert description.input_key('x') == 'B'

    def test_model_is_object(self):
        description = describe(Database)
        assert description.is_object
        assert description.model is Database

    def test_bare_field(self):
        description = describe(Field(alias='HOST'))
        assert description.tag == 'HOST'

    def test_children(self):
        children = describe_children(Database)

        assert list(children) == ['url', 'pool_size']
        assert children['url'].tag == 'DATABASE_URL'
        assert children['url'].label == 'database url'
        assert children['pool_size'].tag is None
        assert not children['pool_size'].required
        assert children['pool_size'].input_key('pool_size') == 'pool_size'

    def test_alias_choices_rejected(self):
        with pytest.raises(SchemaDefinitionError):
            describe(Annotated[str, Field(validation_alias=AliasChoices('A', 'B'))])

    def test_not_a_schema(self):
        with pytest.raises(SchemaDefinitionError):
            describe('PORT')


class TestParseNode:
    """Test the inference dialect."""

    def test_variants(self):
        pattern = re.compile(r'^\d+$')

        node = parse_node({
            'name': 'NAME',
            'nick': '?NICK',
            'port': pattern,
            'db': Database,
            'debug': Optional[bool],
            'nested': {'key': 'KEY'},
        })

        assert isinstance(node, ObjectNode)
        assert node.children['name'] == NamedLeaf('NAME')
        assert node.children['nick'] == OptionalNamedLeaf('NICK')
        assert node.children['port'] == PatternLeaf(pattern)
        assert isinstance(node.children['db'], ExternalSchemaNode)
        assert node.children['db'].description.is_object
        assert isinstance(node.children['debug'], ExternalSchemaNode)
        assert node.children['nested'] == ObjectNode({'key': NamedLeaf('KEY')})

    def test_custom_optional_marker(self):
        assert parse_node('~NICK', optional_marker='~') == OptionalNamedLeaf('NICK')
        assert parse_node('?NICK', optional_marker='~') == NamedLeaf('?NICK')

    @pytest.mark.parametrize('value', ['', '?', 42, 3.5, None])
    def test_rejected_values(self, value):
        with pytest.raises(SchemaDefinitionError):
            parse_node(value)


class TestParseDescriptorNode:
    """Test the descriptor dialect."""

    def test_descriptor(self):
        node = parse_descriptor_node({'env': 'PORT', 'type': 'number', 'valid': [80, 443], 'trim': True})
        assert node == DescriptorLeaf(env='PORT', type='number', required=True, trim=True, valid=(80, 443))

    def test_default_makes_optional(self):
        node = parse_descriptor_node({'env': 'DEBUG', 'default': False})
        assert node.has_default
        assert node.default is False
        assert not node.required

    def test_bare_string(self):
        assert parse_descriptor_node('HOST') == NamedLeaf('HOST')

    def test_nested(self):
        node = parse_descriptor_node({'db': {'host': 'HOST', 'port': {'env': 'PORT'}}})
        assert node == ObjectNode({'db': ObjectNode({'host': NamedLeaf('HOST'), 'port': DescriptorLeaf(env='PORT')})})

    def test_invalid_valid_option(self):
        with pytest.raises(SchemaDefinitionError):
            parse_descriptor_node({'env': 'MODE', 'valid': 'dev'})

    def test_empty_env(self):
        with pytest.raises(SchemaDefinitionError):
            parse_descriptor_node({'env': ''})
