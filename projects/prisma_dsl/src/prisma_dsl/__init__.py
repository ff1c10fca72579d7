"""Build validated Prisma schema ASTs and print them as schema code."""

from prisma_dsl.builders import (
    create_data_source,
    create_enum,
    create_generator,
    create_model,
    create_object_field,
    create_scalar_field,
    create_schema,
)
from prisma_dsl.definition import (
    definition_to_schema,
    load_definition,
    schema_to_definition,
)
from prisma_dsl.errors import (
    DefinitionError,
    FormatterError,
    InvalidDefaultError,
    InvalidNameError,
    InvalidValueError,
    OptionalListError,
    SchemaError,
    UnknownTypeError,
)
from prisma_dsl.formatting import (
    AlignFormatter,
    Formatter,
    PrismaCliFormatter,
    format_schema,
)
from prisma_dsl.printer import (
    print_data_source,
    print_documentation,
    print_enum,
    print_field,
    print_generator,
    print_model,
    print_schema,
    render_schema,
)
from prisma_dsl.reflection import read_only_sqlite, sqlite_to_schema
from prisma_dsl.types import (
    AUTO_INCREMENT,
    CUID,
    NOW,
    UUID,
    CallExpression,
    DataSource,
    DataSourceProvider,
    EnvReference,
    Enum,
    Generator,
    LiteralDefault,
    LiteralURL,
    Model,
    ObjectField,
    ScalarField,
    ScalarType,
    Schema,
)

__all__ = [
    "AUTO_INCREMENT",
    "CUID",
    "NOW",
    "UUID",
    "AlignFormatter",
    "CallExpression",
    "DataSource",
    "DataSourceProvider",
    "DefinitionError",
    "Enum",
    "EnvReference",
    "Formatter",
    "FormatterError",
    "Generator",
    "InvalidDefaultError",
    "InvalidNameError",
    "InvalidValueError",
    "LiteralDefault",
    "LiteralURL",
    "Model",
    "ObjectField",
    "OptionalListError",
    "PrismaCliFormatter",
    "ScalarField",
    "ScalarType",
    "Schema",
    "SchemaError",
    "UnknownTypeError",
    "create_data_source",
    "create_enum",
    "create_generator",
    "create_model",
    "create_object_field",
    "create_scalar_field",
    "create_schema",
    "definition_to_schema",
    "format_schema",
    "load_definition",
    "print_data_source",
    "print_documentation",
    "print_enum",
    "print_field",
    "print_generator",
    "print_model",
    "print_schema",
    "read_only_sqlite",
    "render_schema",
    "schema_to_definition",
    "sqlite_to_schema",
]
