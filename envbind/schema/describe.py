"""
Schema Description

Read-only introspection of pydantic schemas: what type a schema validates,
which environment variable it is tagged with, how it is labelled and which
fields it has. The binding compiler only looks at pydantic schemas through
this module.

In pydantic terms the environment variable "tag" is the field alias
(a string `validation_alias` wins over `alias`) and the display "label" is
the field title.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from envbind.utils.exceptions import SchemaDefinitionError


@dataclass(frozen=True)
class SchemaDescription:
    """Introspected view of a pydantic schema or model field."""
    field: FieldInfo
    model: Optional[Type[BaseModel]] = None
    tag: Optional[str] = None
    label: Optional[str] = None

    @property
    def is_object(self) -> bool:
        return self.model is not None

    @property
    def required(self) -> bool:
        return self.field.is_required()

    @property
    def annotation(self) -> Any:
        return self.field.annotation if self.field.annotation is not None else Any

    def input_key(self, name: str) -> str:
        """Key pydantic reads this field from when validating a mapping."""
        return self.tag or name


def is_model_class(value: Any) -> bool:
    return isinstance(value, type) and get_origin(value) is None and issubclass(value, BaseModel)


def is_pydantic_schema(value: Any) -> bool:
    """
    Whether a value is something pydantic can validate against.

    Accepts model classes, plain types, typing constructs such as
    `Annotated[...]` or `Optional[...]`, and bare `Field(...)` objects.
    """
    if isinstance(value, (str, bytes)):
        return False
    if isinstance(value, FieldInfo):
        return True
    return isinstance(value, type) or get_origin(value) is not None


def describe_field(field: FieldInfo) -> SchemaDescription:
    """
    Describe a pydantic field.

    Raises:
        SchemaDefinitionError: If the field uses an alias path or alias choices
    """
    validation_alias = field.validation_alias
    if validation_alias is not None and not isinstance(validation_alias, str):
        raise SchemaDefinitionError(
            f"Only string aliases can name environment variables, got {validation_alias!r}"
        )

    annotation = field.annotation
    model = annotation if is_model_class(annotation) else None
    return SchemaDescription(
        field=field,
        model=model,
        tag=validation_alias or field.alias,
        label=field.title,
    )


def describe(schema: Any) -> SchemaDescription:
    """
    Describe a standalone pydantic schema.

    Args:
        schema: Model class, annotation or FieldInfo

    Returns:
        SchemaDescription
    """
    if isinstance(schema, FieldInfo):
        return describe_field(schema)
    if not is_pydantic_schema(schema):
        raise SchemaDefinitionError(f"Not a pydantic schema: {schema!r}")
    return describe_field(FieldInfo.from_annotation(schema))


def describe_children(model: Type[BaseModel]) -> Dict[str, SchemaDescription]:
    """Describe every declared field of a model, in declaration order."""
    return {name: describe_field(field) for name, field in model.model_fields.items()}
