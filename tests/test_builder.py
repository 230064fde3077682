"""
Unit Tests for the Descriptor Builder

Tests for build_env() and the field validators behind it.
"""

import pytest

from envbind.builder import build_env, coerce_boolean, coerce_number, FieldError
from envbind.utils.exceptions import EnvValidationError, SchemaDefinitionError

BANNER = 'Invalid environment:'


def expect_failure(schema, environ) -> EnvValidationError:
    with pytest.raises(EnvValidationError) as exc_info:
        build_env(schema, environ=environ)
    return exc_info.value


class TestLoading:
    """Required and optional variables."""

    def test_load_variables(self):
        environ = {'FOO': 'foo', 'BAR': 'bar', 'BAZ': 'baz'}

        config = build_env({'foo': 'FOO', 'bar': 'BAR', 'baz': 'BAZ'}, environ=environ)

        assert config == {'foo': 'foo', 'bar': 'bar', 'baz': 'baz'}

    def test_missing_required(self):
        """Test every missing variable is listed, in schema order."""
        error = expect_failure({'foo': 'FOO', 'bar': 'BAR', 'baz': 'BAZ'}, {})

        assert error.message == f'{BANNER}\n\t"FOO" is required\n\t"BAR" is required\n\t"BAZ" is required'
        assert len(error.details) == 3
        assert [d.type for d in error.details] == ['missing'] * 3

    def test_descriptor_required_by_default(self):
        error = expect_failure({'foo': {'env': 'FOO'}}, {})
        assert error.message == f'{BANNER}\n\t"FOO" is required'

    def test_required_false(self):
        assert build_env({'foo': {'env': 'FOO', 'required': False}}, environ={}) == {'foo': None}

    def test_optional_true(self):
        assert build_env({'foo': {'env': 'FOO', 'optional': True}}, environ={}) == {'foo': None}

    def test_unknown_variables_not_returned(self):
        config = build_env({'key': 'TEST'}, environ={'FOO': 'test', 'BAR': 'test', 'TEST': 'test'})
        assert config == {'key': 'test'}


class TestTrimming:
    """Whitespace trimming is opt-in."""

    def test_trim(self):
        config = build_env({'foo': {'env': 'FOO', 'trim': True}}, environ={'FOO': '  foo \t'})
        assert config == {'foo': 'foo'}

    def test_no_trim_by_default(self):
        config = build_env({'foo': {'env': 'FOO'}}, environ={'FOO': '  foo '})
        assert config == {'foo': '  foo '}

    def test_trim_before_valid(self):
        config = build_env({'mode': {'env': 'MODE', 'trim': True, 'valid': ['dev', 'prod']}}, environ={'MODE': ' dev '})
        assert config == {'mode': 'dev'}


class TestValidSet:
    """Membership restriction."""

    def test_value_in_set(self):
        config = build_env({'mode': {'env': 'MODE', 'valid': ['dev', 'prod']}}, environ={'MODE': 'prod'})
        assert config == {'mode': 'prod'}

    def test_value_not_in_set(self):
        error = expect_failure({'mode': {'env': 'MODE', 'valid': ['dev', 'prod']}}, {'MODE': 'staging'})

        assert error.message == f'{BANNER}\n\t"MODE" must be one of [dev, prod]'
        assert error.details[0].type == 'not_allowed'

    def test_valid_compares_coerced_values(self):
        schema = {'workers': {'env': 'WORKERS', 'type': 'number', 'valid': [1, 2, 4]}}
        assert build_env(schema, environ={'WORKERS': '4'}) == {'workers': 4}

    def test_boolean_does_not_match_integer(self):
        """Test true is not accepted where only 1 is allowed."""
        error = expect_failure({'flag': {'env': 'FLAG', 'type': 'boolean', 'valid': [1]}}, {'FLAG': 'true'})

        assert error.message == f'{BANNER}\n\t"FLAG" must be one of [1]'

    def test_integer_does_not_match_boolean(self):
        schema = {'workers': {'env': 'WORKERS', 'type': 'number', 'valid': [True]}}
        with pytest.raises(EnvValidationError):
            build_env(schema, environ={'WORKERS': '1'})


class TestDefaults:
    """Defaults make a field optional and apply only when it is unset."""

    @pytest.mark.parametrize('default', ['fallback', False, None, '', 0])
    def test_default_used_when_unset(self, default):
        config = build_env({'foo': {'env': 'FOO', 'default': default}}, environ={})
        assert config == {'foo': default}

    def test_default_ignored_when_set(self):
        config = build_env({'foo': {'env': 'FOO', 'default': 'fallback'}}, environ={'FOO': 'bar'})
        assert config == {'foo': 'bar'}

    def test_default_ignored_when_empty(self):
        config = build_env({'foo': {'env': 'FOO', 'default': 'fallback'}}, environ={'FOO': ''})
        assert config == {'foo': ''}

    def test_default_overrides_required(self):
        config = build_env({'foo': {'env': 'FOO', 'required': True, 'default': 'x'}}, environ={})
        assert config == {'foo': 'x'}


class TestTypes:
    """Number and boolean coercion."""

    def test_number(self):
        config = build_env({'foo': {'env': 'FOO', 'type': 'number'}}, environ={'FOO': '13.37'})
        assert config == {'foo': 13.37}

    def test_integer(self):
        config = build_env({'foo': {'env': 'FOO', 'type': 'number'}}, environ={'FOO': '4242'})
        assert config == {'foo': 4242}
        assert isinstance(config['foo'], int)

    def test_invalid_number(self):
        error = expect_failure({'foo': {'env': 'FOO', 'type': 'number'}}, {'FOO': 'abc'})

        assert error.message == f'{BANNER}\n\t"FOO" must be a number'
        assert error.details[0].type == 'number_parsing'

    def test_boolean(self):
        config = build_env({'foo': {'env': 'FOO', 'type': 'boolean'}}, environ={'FOO': 'FALSE'})
        assert config == {'foo': False}

    def test_boolean_true(self):
        config = build_env({'foo': {'env': 'FOO', 'type': 'boolean'}}, environ={'FOO': 'True'})
        assert config == {'foo': True}

    def test_invalid_boolean(self):
        error = expect_failure({'foo': {'env': 'FOO', 'type': 'boolean'}}, {'FOO': 'yes'})
        assert error.message == f'{BANNER}\n\t"FOO" must be a boolean'

    @pytest.mark.parametrize('raw', ['', 'nan', 'inf', '-Infinity', '1_000', '0x10'])
    def test_rejected_numbers(self, raw):
        with pytest.raises(FieldError):
            coerce_number('FOO', raw)

    @pytest.mark.parametrize('raw,expected', [('-7', -7), ('1e3', 1000.0), (' 2.5 ', 2.5)])
    def test_accepted_numbers(self, raw, expected):
        assert coerce_number('FOO', raw) == expected

    def test_boolean_case_insensitive(self):
        assert coerce_boolean('FOO', 'tRuE') is True


class TestNesting:
    """Nested mappings."""

    def test_nested_objects(self):
        schema = {
            'db': {
                'host': 'DB_HOST',
                'port': {'env': 'DB_PORT', 'type': 'number', 'default': 5432},
            },
            'debug': {'env': 'DEBUG', 'type': 'boolean', 'default': False},
        }

        config = build_env(schema, environ={'DB_HOST': 'localhost'})

        assert config == {'db': {'host': 'localhost', 'port': 5432}, 'debug': False}

    def test_nested_errors_collected(self):
        schema = {'db': {'host': 'DB_HOST', 'port': {'env': 'DB_PORT', 'type': 'number'}}, 'name': 'NAME'}

        error = expect_failure(schema, {'DB_PORT': 'x'})

        assert error.message == (
            f'{BANNER}\n\t"DB_HOST" is required\n\t"DB_PORT" must be a number\n\t"NAME" is required'
        )
        assert [d.path for d in error.details] == [('db', 'host'), ('db', 'port'), ('name',)]


class TestSchemaErrors:
    """Malformed descriptor schemas are rejected before validation."""

    def test_unknown_option(self):
        with pytest.raises(SchemaDefinitionError):
            build_env({'foo': {'env': 'FOO', 'requried': False}}, environ={})

    def test_unknown_type(self):
        with pytest.raises(SchemaDefinitionError):
            build_env({'foo': {'env': 'FOO', 'type': 'date'}}, environ={'FOO': '2024-01-01'})

    def test_non_mapping_root(self):
        with pytest.raises(SchemaDefinitionError):
            build_env('FOO', environ={})

    def test_unsupported_leaf(self):
        with pytest.raises(SchemaDefinitionError):
            build_env({'foo': 42}, environ={})
