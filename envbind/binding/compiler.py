"""
Schema Compiler

Turns a schema into a pydantic model plus the exact bag of raw environment
values to validate with it, in a single walk. The environment is only read
through the resolver.
"""

from dataclasses import dataclass, field
from typing import Annotated, Any, Dict, Mapping, Optional, Pattern, Sequence, Tuple, Type

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, create_model
from pydantic_core import PydanticCustomError

from envbind.binding.resolver import resolve_name
from envbind.config.settings import Settings, get_config
from envbind.schema.describe import describe, describe_children, is_model_class, is_pydantic_schema
from envbind.schema.nodes import (
    ExternalSchemaNode,
    NamedLeaf,
    ObjectNode,
    OptionalNamedLeaf,
    PatternLeaf,
    parse_node,
)
from envbind.utils.exceptions import SchemaDefinitionError, SchemaInferenceError
from envbind.utils.logger import get_logger

logger = get_logger(__name__)

ROOT_MODEL = 'model'
ROOT_MAPPING = 'mapping'
ROOT_LEAF = 'leaf'

Loc = Tuple[str, ...]

_GENERATED_CONFIG = ConfigDict(regex_engine='python-re', extra='ignore')


def _empty_as_none(value: Any) -> Any:
    return None if value == '' else value


OptionalStr = Annotated[Optional[str], BeforeValidator(_empty_as_none)]


def _matching(pattern: Pattern) -> Any:
    """String annotation checked with the compiled pattern, flags included."""

    def check(value: str) -> str:
        if pattern.search(value) is None:
            raise PydanticCustomError(
                'string_pattern_mismatch',
                "String should match pattern '{pattern}'",
                {'pattern': pattern.pattern},
            )
        return value

    return Annotated[str, AfterValidator(check)]


def _internal_name(index: int) -> str:
    # Schema keys may clash with BaseModel attributes; generated models use
    # positional names and map back to the keys afterwards.
    return f'field_{index}'


@dataclass
class CompiledSchema:
    """A validator and the raw values to feed it."""
    model: Type[BaseModel]
    values: Dict[str, Any]
    root_kind: str
    labels: Dict[Loc, str] = field(default_factory=dict)
    paths: Dict[Loc, Tuple[str, ...]] = field(default_factory=dict)
    shape: Optional[ObjectNode] = None

    def label_for(self, loc: Sequence[Any]) -> str:
        """Display label of the innermost labelled field containing loc."""
        loc = tuple(str(part) for part in loc)
        for end in range(len(loc), 0, -1):
            if loc[:end] in self.labels:
                return self.labels[loc[:end]]
        return self.model.__name__

    def path_for(self, loc: Sequence[Any]) -> Tuple[Any, ...]:
        """Translate a pydantic error location into schema keys."""
        loc = tuple(loc)
        str_loc = tuple(str(part) for part in loc)
        for end in range(len(loc), 0, -1):
            if str_loc[:end] in self.paths:
                return self.paths[str_loc[:end]] + loc[end:]
        return loc

    def to_output(self, instance: BaseModel) -> Any:
        if self.root_kind == ROOT_MODEL:
            return instance
        return _unwrap(instance, self.shape)


def _unwrap(instance: BaseModel, node: ObjectNode) -> Dict[str, Any]:
    result = {}
    for index, (key, child) in enumerate(node.children.items()):
        value = getattr(instance, _internal_name(index))
        if isinstance(child, ObjectNode):
            value = _unwrap(value, child)
        result[key] = value
    return result


class SchemaCompiler:
    """
    Compiles schemas against one environment snapshot.

    A compiler instance records labels while walking, so it is used for a
    single compile() call.
    """

    def __init__(self, environ: Mapping[str, str], settings: Optional[Settings] = None):
        self.environ = environ
        self.settings = settings or get_config()
        self.labels: Dict[Loc, str] = {}
        self.paths: Dict[Loc, Tuple[str, ...]] = {}

    def _resolve(self, key: str, tag: Optional[str] = None):
        return resolve_name(key, self.environ, tag=tag, probe_order=self.settings.resolution.probe_order)

    def _record(self, loc: Loc, path: Tuple[str, ...], label: Optional[str] = None) -> None:
        self.paths[loc] = path
        if label is not None:
            self.labels[loc] = label

    def compile(self, schema: Any) -> CompiledSchema:
        """
        Compile a schema.

        Args:
            schema: pydantic model class, mapping schema, or a standalone
                pydantic annotation tagged with an alias

        Returns:
            CompiledSchema

        Raises:
            SchemaInferenceError: If a standalone schema has no alias
            SchemaDefinitionError: If the schema contains unsupported values
        """
        if is_model_class(schema):
            values = self._collect_model(schema, (), ())
            return self._result(schema, values, ROOT_MODEL)

        if isinstance(schema, Mapping):
            node = parse_node(schema, self.settings.resolution.optional_marker)
            model, values = self._compile_object(node, (), ())
            return self._result(model, values, ROOT_MAPPING, shape=node)

        if is_pydantic_schema(schema):
            description = describe(schema)
            if description.is_object:
                values = self._collect_model(description.model, (), ())
                return self._result(description.model, values, ROOT_MODEL)
            if not description.tag:
                raise SchemaInferenceError(
                    "Cannot infer environment variable name from schema, use a mapping or an alias"
                )
            node = ObjectNode({description.tag: ExternalSchemaNode(description)})
            model, values = self._compile_object(node, (), ())
            return self._result(model, values, ROOT_LEAF, shape=node)

        raise SchemaDefinitionError(f"Unsupported schema: {schema!r}")

    def _result(self, model, values, root_kind, shape=None) -> CompiledSchema:
        logger.debug(f"Compiled {root_kind} schema with {len(self.labels)} environment fields")
        return CompiledSchema(
            model=model,
            values=values,
            root_kind=root_kind,
            labels=dict(self.labels),
            paths=dict(self.paths),
            shape=shape,
        )

    def _collect_model(self, model: Type[BaseModel], loc: Loc, path: Tuple[str, ...]) -> Dict[str, Any]:
        """Collect raw values for a pydantic model's fields."""
        values: Dict[str, Any] = {}
        for name, description in describe_children(model).items():
            key = description.input_key(name)
            child_loc = loc + (key,)
            child_path = path + (name,)

            if description.is_object:
                self._record(child_loc, child_path)
                values[key] = self._collect_model(description.model, child_loc, child_path)
                continue

            resolved = self._resolve(name, description.tag)
            self._record(child_loc, child_path, description.label or resolved.name)
            if resolved.value is not None:
                values[key] = resolved.value
        return values

    def _compile_object(self, node: ObjectNode, loc: Loc, path: Tuple[str, ...]):
        """Build a pydantic model and value bag for a mapping node."""
        fields: Dict[str, Any] = {}
        values: Dict[str, Any] = {}

        for index, (key, child) in enumerate(node.children.items()):
            internal = _internal_name(index)
            child_path = path + (key,)
            input_key = internal
            value = None

            if isinstance(child, NamedLeaf):
                fields[internal] = (str, Field(..., min_length=1, title=child.name))
                self._record(loc + (input_key,), child_path, child.name)
                value = self.environ.get(child.name)

            elif isinstance(child, OptionalNamedLeaf):
                fields[internal] = (OptionalStr, Field(None, title=child.name))
                self._record(loc + (input_key,), child_path, child.name)
                value = self.environ.get(child.name)

            elif isinstance(child, PatternLeaf):
                resolved = self._resolve(key)
                fields[internal] = (_matching(child.pattern), Field(..., min_length=1, title=resolved.name))
                self._record(loc + (input_key,), child_path, resolved.name)
                value = resolved.value

            elif isinstance(child, ExternalSchemaNode):
                description = child.description
                input_key = description.input_key(internal)
                fields[internal] = (description.annotation, description.field)
                if description.is_object:
                    self._record(loc + (input_key,), child_path)
                    value = self._collect_model(description.model, loc + (input_key,), child_path)
                else:
                    resolved = self._resolve(key, description.tag)
                    self._record(loc + (input_key,), child_path, description.label or resolved.name)
                    value = resolved.value

            elif isinstance(child, ObjectNode):
                self._record(loc + (input_key,), child_path)
                sub_model, value = self._compile_object(child, loc + (input_key,), child_path)
                fields[internal] = (sub_model, ...)

            else:
                raise SchemaDefinitionError(f"Unsupported schema value for {'.'.join(child_path)!r}: {child!r}")

            if value is not None:
                values[input_key] = value

        model = create_model('EnvSchema', __config__=_GENERATED_CONFIG, **fields)
        return model, values


def compile_schema(schema: Any, environ: Mapping[str, str], settings: Optional[Settings] = None) -> CompiledSchema:
    """
    Compile a schema against an environment snapshot.

    Args:
        schema: pydantic model class, mapping schema or tagged annotation
        environ: Environment snapshot
        settings: Library settings, defaults to get_config()

    Returns:
        CompiledSchema
    """
    return SchemaCompiler(environ, settings).compile(schema)
