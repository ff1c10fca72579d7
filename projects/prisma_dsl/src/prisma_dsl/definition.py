"""Schema definition documents (TOML or JSON) and their conversion to the AST.

A definition mirrors the builder arguments::

    [datasource]
    name = "db"
    provider = "postgresql"
    url = { env = "DATABASE_URL" }

    [[models]]
    name = "User"

    [[models.fields]]
    name = "id"
    type = "Int"
    is_id = true
    is_required = true
    default = { call = "autoincrement" }

Fields whose ``type`` is a scalar type become scalar fields, any other type
becomes an object field.
"""

from __future__ import annotations

import json
import tomllib
from collections.abc import Mapping
from dataclasses import asdict
from logging import getLogger
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

from prisma_dsl.builders import (
    create_data_source,
    create_enum,
    create_generator,
    create_model,
    create_object_field,
    create_scalar_field,
    create_schema,
)
from prisma_dsl.errors import DefinitionError
from prisma_dsl.types import (
    CallExpression,
    DataSource,
    DataSourceURL,
    EnvReference,
    Enum,
    Field,
    Generator,
    LiteralDefault,
    LiteralURL,
    Model,
    ScalarDefault,
    ScalarType,
    Schema,
)

if TYPE_CHECKING:
    from pathlib import Path

logger = getLogger(__name__)

type DefaultDefinition = str | bool | int | float | dict[str, str]
type URLDefinition = str | dict[str, str]


class FieldDefinition(TypedDict):
    """Definition of a scalar or object field."""

    name: str
    type: str
    is_list: NotRequired[bool]
    is_required: NotRequired[bool]
    is_id: NotRequired[bool]
    is_unique: NotRequired[bool]
    is_updated_at: NotRequired[bool]
    default: NotRequired[DefaultDefinition]
    relation_name: NotRequired[str]
    relation_fields: NotRequired[list[str]]
    relation_references: NotRequired[list[str]]
    documentation: NotRequired[str]


class ModelDefinition(TypedDict):
    """Definition of a model."""

    name: str
    fields: list[FieldDefinition]
    documentation: NotRequired[str]


class EnumDefinition(TypedDict):
    """Definition of an enum."""

    name: str
    values: list[str]
    documentation: NotRequired[str]


class DataSourceDefinition(TypedDict):
    """Definition of the data source."""

    name: str
    provider: str
    url: URLDefinition


class GeneratorDefinition(TypedDict):
    """Definition of a generator."""

    name: str
    provider: str
    output: NotRequired[str]
    binary_targets: NotRequired[list[str]]


class SchemaDefinition(TypedDict):
    """Root of a schema definition document."""

    datasource: NotRequired[DataSourceDefinition]
    generators: NotRequired[list[GeneratorDefinition]]
    models: NotRequired[list[ModelDefinition]]
    enums: NotRequired[list[EnumDefinition]]


SCALAR_FIELD_KEYS = {
    "name",
    "type",
    "is_list",
    "is_required",
    "is_id",
    "is_unique",
    "is_updated_at",
    "default",
    "documentation",
}
OBJECT_FIELD_KEYS = {
    "name",
    "type",
    "is_list",
    "is_required",
    "relation_name",
    "relation_fields",
    "relation_references",
    "documentation",
}
SCALAR_TYPE_NAMES = {scalar_type.value for scalar_type in ScalarType}


def _check_keys(entry: Mapping[str, Any], allowed: set[str], context: str) -> None:
    """Reject entries that are not tables or carry unknown keys."""
    if not isinstance(entry, Mapping):
        msg = f"{context} must be a table, got {type(entry).__name__}"
        raise DefinitionError(msg)
    if unknown := set(entry) - allowed:
        msg = f"{context} has unknown keys: {', '.join(sorted(unknown))}"
        raise DefinitionError(msg)
    if "name" in allowed and "name" not in entry:
        msg = f"{context} is missing 'name'"
        raise DefinitionError(msg)


def parse_default(raw: DefaultDefinition | None) -> ScalarDefault:
    """Parse ``{ call = "now" }`` into a call expression, anything else as a literal."""
    match raw:
        case None:
            return None
        case {"call": str(callee)} if len(raw) == 1:
            return CallExpression(callee)
        case str() | bool() | int() | float():
            return LiteralDefault(raw)
        case _:
            msg = f"Invalid default definition: {raw!r}"
            raise DefinitionError(msg)


def parse_url(raw: URLDefinition) -> DataSourceURL:
    """Parse ``{ env = "NAME" }`` as an environment reference, a string as literal."""
    match raw:
        case str():
            return LiteralURL(raw)
        case {"env": str(name)} if len(raw) == 1:
            return EnvReference(name)
        case _:
            msg = f"Invalid url definition: {raw!r}"
            raise DefinitionError(msg)


def field_from_definition(definition: FieldDefinition, model_name: str) -> Field:
    """Build a scalar field for scalar types and an object field otherwise."""
    _check_keys(
        definition,
        SCALAR_FIELD_KEYS | OBJECT_FIELD_KEYS,
        f"Field of model {model_name!r}",
    )
    context = f"Field {definition['name']!r} of model {model_name!r}"
    if definition.get("type") in SCALAR_TYPE_NAMES:
        _check_keys(definition, SCALAR_FIELD_KEYS, context)
        return create_scalar_field(
            **{key: value for key, value in definition.items() if key != "default"},
            default=parse_default(definition.get("default")),
        )
    _check_keys(definition, OBJECT_FIELD_KEYS, context)
    if "type" not in definition:
        msg = f"{context} is missing 'type'"
        raise DefinitionError(msg)
    return create_object_field(**definition)


def model_from_definition(definition: ModelDefinition) -> Model:
    """Build a model and its fields."""
    _check_keys(definition, {"name", "fields", "documentation"}, "Model")
    return create_model(
        name=definition["name"],
        fields=[
            field_from_definition(field, definition["name"])
            for field in definition.get("fields", [])
        ],
        documentation=definition.get("documentation"),
    )


def enum_from_definition(definition: EnumDefinition) -> Enum:
    """Build an enum."""
    _check_keys(definition, {"name", "values", "documentation"}, "Enum")
    return create_enum(
        name=definition["name"],
        values=definition.get("values", []),
        documentation=definition.get("documentation"),
    )


def data_source_from_definition(definition: DataSourceDefinition) -> DataSource:
    """Build the data source."""
    _check_keys(definition, {"name", "provider", "url"}, "Data source")
    if "provider" not in definition or "url" not in definition:
        msg = "Data source needs both 'provider' and 'url'"
        raise DefinitionError(msg)
    return create_data_source(
        name=definition["name"],
        provider=definition["provider"],
        url=parse_url(definition["url"]),
    )


def generator_from_definition(definition: GeneratorDefinition) -> Generator:
    """Build a generator."""
    allowed = {"name", "provider", "output", "binary_targets"}
    _check_keys(definition, allowed, "Generator")
    if "provider" not in definition:
        msg = f"Generator {definition['name']!r} is missing 'provider'"
        raise DefinitionError(msg)
    return create_generator(**definition)


def definition_to_schema(definition: SchemaDefinition) -> Schema:
    """Build a validated schema from a definition document.

    Validation errors of the builders propagate as they are.
    """
    _check_keys(definition, {"datasource", "generators", "models", "enums"}, "Schema")
    data_source = definition.get("datasource")
    return create_schema(
        data_source=data_source_from_definition(data_source) if data_source else None,
        generators=[
            generator_from_definition(generator)
            for generator in definition.get("generators", [])
        ],
        models=[model_from_definition(m) for m in definition.get("models", [])],
        enums=[enum_from_definition(e) for e in definition.get("enums", [])],
    )


def load_definition(path: Path) -> Schema:
    """Read a TOML or JSON definition file and build its schema."""
    logger.debug("Loading schema definition from %s", path)
    try:
        match path.suffix.lower():
            case ".toml":
                with path.open("rb") as f:
                    definition = tomllib.load(f)
            case ".json":
                definition = json.loads(path.read_text())
            case _:
                msg = f"Unsupported definition format: {path.suffix}"
                raise DefinitionError(msg)
    except (tomllib.TOMLDecodeError, json.JSONDecodeError) as err:
        msg = f"Cannot parse {path.name}: {err}"
        raise DefinitionError(msg) from err
    return definition_to_schema(definition)


def _default_to_definition(default: ScalarDefault) -> DefaultDefinition | None:
    if default is None:
        return None
    match default.kind:
        case "call":
            return {"call": default.callee}
        case "literal":
            return default.value


def _url_to_definition(url: DataSourceURL) -> URLDefinition:
    match url.kind:
        case "env":
            return {"env": url.name}
        case "literal":
            return url.url


def _field_to_definition(field: Field) -> FieldDefinition:
    """Keep only the values that differ from the builder defaults."""
    defaults = {
        "is_list": False,
        "is_required": False,
        "is_id": False,
        "is_unique": False,
        "is_updated_at": False,
        "relation_name": None,
        "relation_fields": (),
        "relation_references": (),
        "relation_on_delete": "NONE",
        "documentation": None,
        "default": None,
        "kind": field.kind,
    }
    values = asdict(field)
    values["default"] = (
        _default_to_definition(field.default) if field.kind == "scalar" else None
    )
    definition: dict[str, Any] = {
        key: list(value) if isinstance(value, tuple) else value
        for key, value in values.items()
        if key not in defaults or value != defaults[key]
    }
    definition["type"] = str(field.type)
    return definition  # pyright: ignore[reportReturnType]


def schema_to_definition(schema: Schema) -> SchemaDefinition:
    """Convert a schema to a definition document, the inverse of the builders."""
    definition: SchemaDefinition = {}
    if source := schema.data_source:
        definition["datasource"] = {
            "name": source.name,
            "provider": str(source.provider),
            "url": _url_to_definition(source.url),
        }
    if schema.generators:
        definition["generators"] = [
            {
                "name": generator.name,
                "provider": generator.provider,
                **(
                    {"output": generator.output}
                    if generator.output is not None
                    else {}
                ),
                **(
                    {"binary_targets": list(generator.binary_targets)}
                    if generator.binary_targets
                    else {}
                ),
            }
            for generator in schema.generators
        ]
    if schema.models:
        definition["models"] = [
            {
                "name": model.name,
                "fields": [_field_to_definition(field) for field in model.fields],
                **(
                    {"documentation": model.documentation}
                    if model.documentation
                    else {}
                ),
            }
            for model in schema.models
        ]
    if schema.enums:
        definition["enums"] = [
            {
                "name": enum.name,
                "values": list(enum.values),
                **({"documentation": enum.documentation} if enum.documentation else {}),
            }
            for enum in schema.enums
        ]
    return definition
