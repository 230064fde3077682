"""
Descriptor Builder

Validates environment variables against the descriptor dialect without going
through pydantic:

    build_env({
        'port': {'env': 'PORT', 'type': 'number', 'default': 8080},
        'mode': {'env': 'MODE', 'valid': ['dev', 'prod']},
        'db': {'url': 'DATABASE_URL'},
    })
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from envbind.binding.validation import format_error_message
from envbind.builder.fields import MISSING, FieldError, FieldValidator
from envbind.config.settings import Settings, get_config
from envbind.environment import snapshot_environment
from envbind.schema.nodes import DescriptorLeaf, NamedLeaf, ObjectNode, parse_descriptor_node
from envbind.utils.exceptions import EnvValidationError, ErrorDetail, SchemaDefinitionError
from envbind.utils.logger import get_logger

logger = get_logger(__name__)


class EnvBuilder:
    """Builds validators for a descriptor schema and runs them over one snapshot."""

    def __init__(self, environ: Mapping[str, str], settings: Optional[Settings] = None):
        self.environ = environ
        self.settings = settings or get_config()

    def compile(self, schema: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """
        Build the validator tree and the raw value bag.

        Unset variables are left out of the bag so that default and required
        handling happen in the validators.

        Returns:
            (validators, values), both shaped like the schema
        """
        if not isinstance(schema, Mapping):
            raise SchemaDefinitionError(f"Schema root must be a mapping, got {schema!r}")
        return self._compile_object(parse_descriptor_node(schema))

    def _compile_object(self, node: ObjectNode):
        validators: Dict[str, Any] = {}
        values: Dict[str, Any] = {}

        for key, child in node.children.items():
            if isinstance(child, ObjectNode):
                validators[key], values[key] = self._compile_object(child)
                continue

            if isinstance(child, NamedLeaf):
                child = DescriptorLeaf(env=child.name)
            if not isinstance(child, DescriptorLeaf):
                raise SchemaDefinitionError(f"Unsupported schema value for {key!r}: {child!r}")

            validators[key] = FieldValidator(child)
            raw = self.environ.get(child.env)
            if raw is not None:
                values[key] = raw

        return validators, values

    def validate(self, validators: Dict[str, Any], values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run every validator, collecting all violations.

        Raises:
            EnvValidationError: If any field fails
        """
        errors: List[ErrorDetail] = []
        result = self._validate_object(validators, values, (), errors)

        if errors:
            messages = self.settings.messages
            logger.warning(
                f"Environment validation failed with {len(errors)} violation(s)",
                extra={'labels': [error.label for error in errors]}
            )
            raise EnvValidationError(
                format_error_message(messages.invalid_banner, [e.message for e in errors], messages.separator),
                errors
            )

        return result

    def _validate_object(self, validators, values, path, errors) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for key, validator in validators.items():
            if isinstance(validator, dict):
                result[key] = self._validate_object(validator, values.get(key, {}), path + (key,), errors)
                continue

            try:
                result[key] = validator.validate(values.get(key, MISSING))
            except FieldError as e:
                errors.append(ErrorDetail(type=e.type, message=e.message, path=path + (key,), label=validator.label))
        return result

    def build(self, schema: Mapping[str, Any]) -> Dict[str, Any]:
        validators, values = self.compile(schema)
        result = self.validate(validators, values)
        logger.debug(f"Environment built: {len(result)} top-level field(s)")
        return result


def build_env(
    schema: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
    settings: Optional[Settings] = None
) -> Dict[str, Any]:
    """
    Load and validate environment variables described by a descriptor schema.

    Args:
        schema: Mapping of keys to variable names, descriptors
            (`env`, `type`, `required`, `optional`, `trim`, `default`,
            `valid`) or nested mappings
        environ: Environment to read. Defaults to os.environ.
        settings: Library settings, defaults to get_config()

    Returns:
        Dict containing exactly the declared keys

    Raises:
        SchemaDefinitionError: If the schema is malformed
        EnvValidationError: If any variable is missing or invalid
    """
    settings = settings or get_config()
    snapshot = snapshot_environment(environ, settings.dotenv_path)
    return EnvBuilder(snapshot, settings).build(schema)
