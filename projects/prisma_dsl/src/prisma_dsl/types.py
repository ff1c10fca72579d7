"""Frozen node types for the Prisma schema AST."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

# Callees of call expression defaults
AUTO_INCREMENT = "autoincrement"
NOW = "now"
CUID = "cuid"
UUID = "uuid"


class DataSourceProvider(StrEnum):
    """Databases a data source can point at."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class ScalarType(StrEnum):
    """Scalar field types of the data model."""

    STRING = "String"
    BOOLEAN = "Boolean"
    INT = "Int"
    FLOAT = "Float"
    DATETIME = "DateTime"
    JSON = "Json"


@dataclass(frozen=True)
class LiteralDefault:
    """Default given as a literal value."""

    value: str | bool | int | float
    kind: Literal["literal"] = field(default="literal", init=False)


@dataclass(frozen=True)
class CallExpression:
    """Default given as a call to a zero-argument function, e.g. ``now()``."""

    callee: str
    kind: Literal["call"] = field(default="call", init=False)


type ScalarDefault = LiteralDefault | CallExpression | None


@dataclass(frozen=True)
class LiteralURL:
    """Connection string written into the schema as is."""

    url: str
    kind: Literal["literal"] = field(default="literal", init=False)


@dataclass(frozen=True)
class EnvReference:
    """Connection string read from an environment variable."""

    name: str
    kind: Literal["env"] = field(default="env", init=False)


type DataSourceURL = LiteralURL | EnvReference


@dataclass(frozen=True)
class DataSource:
    """The ``datasource`` block."""

    name: str
    provider: DataSourceProvider
    url: DataSourceURL


@dataclass(frozen=True)
class Generator:
    """A ``generator`` block."""

    name: str
    provider: str
    output: str | None = None
    binary_targets: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScalarField:
    """Model field holding a scalar value."""

    name: str
    type: ScalarType
    is_list: bool
    is_required: bool
    is_id: bool = False
    is_unique: bool = False
    is_updated_at: bool = False
    default: ScalarDefault = None
    documentation: str | None = None
    kind: Literal["scalar"] = field(default="scalar", init=False)


@dataclass(frozen=True)
class ObjectField:
    """Model field referencing another model or an enum."""

    name: str
    type: str
    is_list: bool
    is_required: bool
    relation_name: str | None = None
    relation_fields: tuple[str, ...] = ()
    relation_references: tuple[str, ...] = ()
    relation_on_delete: Literal["NONE"] = "NONE"
    documentation: str | None = None
    kind: Literal["object"] = field(default="object", init=False)


type Field = ScalarField | ObjectField


@dataclass(frozen=True)
class Model:
    """A ``model`` block."""

    name: str
    fields: tuple[Field, ...]
    documentation: str | None = None


@dataclass(frozen=True)
class Enum:
    """An ``enum`` block."""

    name: str
    values: tuple[str, ...]
    documentation: str | None = None


@dataclass(frozen=True)
class Schema:
    """Root of the AST, owning every top level block."""

    models: tuple[Model, ...] = ()
    enums: tuple[Enum, ...] = ()
    data_source: DataSource | None = None
    generators: tuple[Generator, ...] = ()
