"""Printing of Prisma schema code from the AST.

Every ``print_*`` function returns unformatted code for a single node. The
output is deterministic: printing the same node twice gives the same text.
``print_schema`` joins the statements and runs them through a formatter.
"""

from __future__ import annotations

import json
import math
from typing import TYPE_CHECKING

from prisma_dsl.errors import InvalidValueError
from prisma_dsl.formatting import AlignFormatter

if TYPE_CHECKING:
    from prisma_dsl.formatting import Formatter
    from prisma_dsl.types import (
        DataSource,
        DataSourceURL,
        Enum,
        Field,
        Generator,
        Model,
        ObjectField,
        ScalarDefault,
        ScalarField,
        Schema,
    )


def print_documentation(documentation: str) -> str:
    """Print a documentation comment."""
    return f"/// {documentation}"


def with_documentation(documentation: str | None, code: str) -> str:
    """Prefix code with its documentation comment, if there is any."""
    if documentation:
        return f"{print_documentation(documentation)}\n{code}"
    return code


def print_data_source(data_source: DataSource) -> str:
    """Print data source code. The code is not formatted."""
    url = print_data_source_url(data_source.url)
    return (
        f"datasource {data_source.name} {{\n"
        f'  provider = "{data_source.provider}"\n'
        f"  url      = {url}\n"
        "}"
    )


def print_data_source_url(url: DataSourceURL) -> str:
    """Print a literal url quoted, or an environment reference as ``env()``."""
    match getattr(url, "kind", None):
        case "env":
            return f'env("{url.name}")'
        case "literal":
            return f'"{url.url}"'
        case _:
            msg = f"Invalid data source url: {url!r}"
            raise InvalidValueError(msg)


def print_generator(generator: Generator) -> str:
    """Print generator code. The code is not formatted."""
    lines = [f'provider = "{generator.provider}"']
    if generator.output is not None:
        lines.append(f'output = "{generator.output}"')
    if generator.binary_targets:
        lines.append(f"binaryTargets = {json.dumps(list(generator.binary_targets))}")
    body = "".join(f"  {line}\n" for line in lines)
    return f"generator {generator.name} {{\n{body}}}"


def print_enum(enum: Enum) -> str:
    """Print enum code with one value per line. The code is not formatted."""
    values = "\n".join(enum.values)
    return with_documentation(
        enum.documentation,
        f"enum {enum.name} {{\n{values}\n}}",
    )


def print_model(model: Model) -> str:
    """Print model code with one field per line. The code is not formatted."""
    fields = "\n".join(print_field(field) for field in model.fields)
    return with_documentation(
        model.documentation,
        f"model {model.name} {{\n{fields}\n}}",
    )


def print_field(field: Field) -> str:
    """Print a scalar or object field line. The code is not formatted."""
    match field.kind:
        case "scalar":
            code = print_scalar_field(field)
        case "object":
            code = print_object_field(field)
    return with_documentation(field.documentation, code)


def print_field_modifiers(field: Field) -> str:
    """Print ``[]`` for lists and ``?`` for optional fields."""
    modifiers = []
    if field.is_list:
        modifiers.append("[]")
    if not field.is_required:
        modifiers.append("?")
    return "".join(modifiers)


def _join_segments(*segments: str) -> str:
    return " ".join(segment for segment in segments if segment)


def print_scalar_field(field: ScalarField) -> str:
    """Print ``<name> <type><modifiers> <attributes>`` for a scalar field."""
    attributes = []
    if field.is_id:
        attributes.append("@id")
    if field.is_unique:
        attributes.append("@unique")
    if field.is_updated_at:
        attributes.append("@updatedAt")
    if field.default is not None:
        attributes.append(f"@default({print_scalar_default(field.default)})")
    return _join_segments(
        field.name,
        f"{field.type}{print_field_modifiers(field)}",
        " ".join(attributes),
    )


def print_scalar_default(value: ScalarDefault) -> str:
    """Print the argument of a ``@default`` attribute.

    String, DateTime and Json literals are printed verbatim, the caller owns
    their quoting. Booleans and numbers use their schema spelling.
    """
    if value is not None:
        match getattr(value, "kind", None):
            case "call":
                return f"{value.callee}()"
            case "literal":
                match value.value:
                    case bool():
                        return "true" if value.value else "false"
                    case int() | str():
                        return str(value.value)
                    case float() if math.isfinite(value.value):
                        return str(value.value)
    msg = f"Invalid value: {value}"
    raise InvalidValueError(msg)


def print_object_field(field: ObjectField) -> str:
    """Print ``<name> <type><modifiers> <relation>`` for an object field."""
    return _join_segments(
        field.name,
        f"{field.type}{print_field_modifiers(field)}",
        print_relation(field),
    )


def print_relation(field: ObjectField) -> str:
    """Print the ``@relation`` attribute, or nothing if there is no relation data."""
    arguments = []
    if field.relation_name:
        arguments.append(f'name: "{field.relation_name}"')
    if field.relation_fields:
        arguments.append(f"fields: [{', '.join(field.relation_fields)}]")
    if field.relation_references:
        arguments.append(f"references: [{', '.join(field.relation_references)}]")
    if not arguments:
        return ""
    return f"@relation({', '.join(arguments)})"


def render_schema(schema: Schema) -> str:
    """Join all statements of the schema into unformatted code.

    Statements come in a fixed order: data source, generators, models and
    enums, separated by a blank line.
    """
    statements: list[str] = []
    if schema.data_source is not None:
        statements.append(print_data_source(schema.data_source))
    statements.extend(print_generator(generator) for generator in schema.generators)
    statements.extend(print_model(model) for model in schema.models)
    statements.extend(print_enum(enum) for enum in schema.enums)
    return "\n\n".join(statements)


async def print_schema(schema: Schema, formatter: Formatter | None = None) -> str:
    """Print Prisma schema code from the AST, formatted by ``formatter``.

    Errors raised by the formatter propagate unchanged.
    """
    if formatter is None:
        formatter = AlignFormatter()
    return await formatter.format(render_schema(schema))
