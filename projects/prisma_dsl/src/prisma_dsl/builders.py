"""Builders creating validated, immutable AST nodes."""

from collections.abc import Iterable
from typing import Literal

from prisma_dsl.errors import SchemaError, UnknownTypeError
from prisma_dsl.types import (
    DataSource,
    DataSourceProvider,
    DataSourceURL,
    Enum,
    EnvReference,
    Field,
    Generator,
    LiteralURL,
    Model,
    ObjectField,
    ScalarDefault,
    ScalarField,
    ScalarType,
    Schema,
)
from prisma_dsl.validators import (
    validate_modifiers,
    validate_name,
    validate_scalar_default,
)


def create_schema(
    *,
    models: Iterable[Model] = (),
    enums: Iterable[Enum] = (),
    data_source: DataSource | None = None,
    generators: Iterable[Generator] = (),
) -> Schema:
    """Create a schema AST object."""
    return Schema(
        models=tuple(models),
        enums=tuple(enums),
        data_source=data_source,
        generators=tuple(generators),
    )


def create_enum(
    *,
    name: str,
    values: Iterable[str],
    documentation: str | None = None,
) -> Enum:
    """Create an enum AST object."""
    validate_name(name)
    return Enum(name=name, values=tuple(values), documentation=documentation)


def create_model(
    *,
    name: str,
    fields: Iterable[Field],
    documentation: str | None = None,
) -> Model:
    """Create a model AST object."""
    validate_name(name)
    return Model(name=name, fields=tuple(fields), documentation=documentation)


def scalar_type(type_name: ScalarType | str) -> ScalarType:
    """Resolve a scalar type from its schema name, e.g. ``"DateTime"``."""
    try:
        return ScalarType(type_name)
    except ValueError as err:
        msg = f"Unknown type {type_name}"
        raise UnknownTypeError(msg) from err


def create_scalar_field(  # noqa: PLR0913
    *,
    name: str,
    type: ScalarType | str,  # noqa: A002
    is_list: bool = False,
    is_required: bool = False,
    is_id: bool = False,
    is_unique: bool = False,
    is_updated_at: bool = False,
    default: ScalarDefault = None,
    documentation: str | None = None,
) -> ScalarField:
    """Create a scalar field AST object.

    Validates the name, the list/required modifiers and that the default
    value fits the scalar type.
    """
    validate_name(name)
    resolved_type = scalar_type(type)
    validate_scalar_default(resolved_type, default)
    validate_modifiers(is_required=is_required, is_list=is_list)
    return ScalarField(
        name=name,
        type=resolved_type,
        is_list=is_list,
        is_required=is_required,
        is_id=is_id,
        is_unique=is_unique,
        is_updated_at=is_updated_at,
        default=default,
        documentation=documentation,
    )


def create_object_field(  # noqa: PLR0913
    *,
    name: str,
    type: str,  # noqa: A002
    is_list: bool = False,
    is_required: bool = False,
    relation_name: str | None = None,
    relation_fields: Iterable[str] = (),
    relation_references: Iterable[str] = (),
    relation_on_delete: Literal["NONE"] = "NONE",
    documentation: str | None = None,
) -> ObjectField:
    """Create an object field AST object.

    The type is not checked against the models of the schema.
    """
    validate_name(name)
    validate_modifiers(is_required=is_required, is_list=is_list)
    return ObjectField(
        name=name,
        type=type,
        is_list=is_list,
        is_required=is_required,
        relation_name=relation_name,
        relation_fields=tuple(relation_fields),
        relation_references=tuple(relation_references),
        relation_on_delete=relation_on_delete,
        documentation=documentation,
    )


def create_data_source(
    *,
    name: str,
    provider: DataSourceProvider | str,
    url: DataSourceURL,
) -> DataSource:
    """Create a data source AST object."""
    validate_name(name)
    try:
        resolved_provider = DataSourceProvider(provider)
    except ValueError as err:
        msg = f"Unknown data source provider {provider}"
        raise SchemaError(msg) from err
    if not isinstance(url, LiteralURL | EnvReference):
        msg = f"Data source url must be a literal url or an env reference: {url!r}"
        raise SchemaError(msg)
    return DataSource(name=name, provider=resolved_provider, url=url)


def create_generator(
    *,
    name: str,
    provider: str,
    output: str | None = None,
    binary_targets: Iterable[str] = (),
) -> Generator:
    """Create a generator AST object."""
    validate_name(name)
    return Generator(
        name=name,
        provider=provider,
        output=output,
        binary_targets=tuple(binary_targets),
    )
