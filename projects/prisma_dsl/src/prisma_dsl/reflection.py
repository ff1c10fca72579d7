"""Generate a schema AST from an existing SQLite database.

Tables become models and columns become scalar fields. Foreign keys become
relation fields on both sides, and ``CHECK (column IN (...))`` constraints on
text columns become enums.
"""

from __future__ import annotations

import re
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any
from warnings import catch_warnings, filterwarnings

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Engine,
    Enum,
    Integer,
    MetaData,
    Numeric,
    create_engine,
    event,
)
from sqlalchemy.exc import SAWarning
from sqlalchemy.schema import UniqueConstraint

from prisma_dsl.builders import (
    create_data_source,
    create_enum,
    create_generator,
    create_model,
    create_object_field,
    create_scalar_field,
    create_schema,
)
from prisma_dsl.types import (
    AUTO_INCREMENT,
    CallExpression,
    DataSourceProvider,
    Field,
    LiteralURL,
    ScalarType,
    Schema,
)

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Inspector
    from sqlalchemy.engine.interfaces import ReflectedColumn
    from sqlalchemy.schema import Column, ForeignKeyConstraint, Table
    from sqlalchemy.types import TypeEngine

    from prisma_dsl.types import Enum as EnumNode

logger = getLogger(__name__)

# Reusable regex components for the IN constraint pattern
IDENTIFIER = r"[\"'`]?(\w+)[\"'`]?"
VALUE = r"'([^']+)'"
IN_CONSTRAINT = re.compile(
    r"\s*".join((IDENTIFIER, "IN", r"\(", r"([^)]+)", r"\)")),
    re.IGNORECASE,
)

GENERATOR_PROVIDER = "prisma-client-js"


def detect_enum_values(constraint_text: str, column_name: str) -> list[str]:
    """Return the values of a ``column IN ('a', 'b')`` constraint on the column.

    Numeric IN lists and constraints on other columns give an empty list.
    """
    if match := IN_CONSTRAINT.search(constraint_text):
        return re.findall(VALUE, match[2]) if match[1] == column_name else []
    return []


def detect_enum(inspector: Inspector, table: Table, column: ReflectedColumn) -> None:
    """Replace the type of reflected columns restricted to a set of strings."""
    for constraint in inspector.get_check_constraints(table.name):
        if values := detect_enum_values(constraint["sqltext"], column["name"]):
            column["type"] = Enum(*values)
            break


def read_only_sqlite(sqlite_location: Path) -> Engine:
    """Create a read-only SQLAlchemy engine for SQLite database."""
    connection_string = f"sqlite:///{sqlite_location}?mode=ro"
    return create_engine(connection_string, connect_args={"uri": True})


def reflect_tables(sqlite_database: Engine) -> list[Table]:
    """Reflect all tables, ordered so referenced tables come first."""
    metadata = MetaData()
    event.listen(metadata, "column_reflect", detect_enum)
    metadata.reflect(bind=sqlite_database)
    with catch_warnings():
        filterwarnings("ignore", category=SAWarning)
        return metadata.sorted_tables


def identifier(name: str) -> str:
    """Turn a database name into a valid schema identifier."""
    cleaned = re.sub(r"[^A-Za-z0-9_]", "_", name)
    if cleaned[:1].isascii() and cleaned[:1].isalpha():
        return cleaned
    return f"db_{cleaned}"


def pascal_case(name: str) -> str:
    """Convert name to PascalCase."""
    return "".join(word[:1].upper() + word[1:] for word in name.split("_"))


def unique_name(name: str, taken: set[str]) -> str:
    """Suffix the name with a counter until it is not taken, then claim it."""
    candidate, counter = name, 1
    while candidate in taken:
        candidate = f"{name}_{counter}"
        counter += 1
    taken.add(candidate)
    return candidate


def sql_to_scalar_type(sql_type: TypeEngine[Any]) -> ScalarType:
    """Map a reflected SQLAlchemy type to a scalar type, defaulting to String."""
    match sql_type:
        case Boolean():
            return ScalarType.BOOLEAN
        case Integer():
            return ScalarType.INT
        case Numeric():
            return ScalarType.FLOAT
        case DateTime() | Date():
            return ScalarType.DATETIME
        case JSON():
            return ScalarType.JSON
        case _:
            return ScalarType.STRING


def _is_required(column: Column[Any]) -> bool:
    return not column.nullable or column.primary_key


def _unique_column_sets(table: Table) -> list[set[str]]:
    """Column sets guaranteed to be unique: the primary key and unique constraints."""
    column_sets = [set(table.primary_key.columns.keys())]
    column_sets.extend(
        {column.name for column in constraint.columns}
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    )
    column_sets.extend(
        {column.name for column in index.columns}
        for index in table.indexes
        if index.unique
    )
    return [column_set for column_set in column_sets if column_set]


@dataclass
class _Names:
    """Schema names claimed for database tables and columns.

    Model and enum names share one namespace, field names are unique per model.
    """

    models: dict[str, str] = field(default_factory=dict)
    fields: dict[str, dict[str, str]] = field(default_factory=dict)
    types: set[str] = field(default_factory=set)
    taken: defaultdict[str, set[str]] = field(
        default_factory=lambda: defaultdict(set),
    )

    @classmethod
    def claim(cls, tables: list[Table]) -> _Names:
        """Claim a model name per table and a field name per column."""
        names = cls()
        for table in tables:
            names.models[table.name] = unique_name(identifier(table.name), names.types)
        for table in tables:
            names.fields[table.name] = {
                column.name: unique_name(
                    identifier(column.name),
                    names.taken[table.name],
                )
                for column in table.columns
            }
        return names


def _column_to_field(
    column: Column[Any],
    table: Table,
    names: _Names,
    enums: list[EnumNode],
) -> Field:
    """Build the field of a column, registering an enum for enum columns."""
    name = names.fields[table.name][column.name]
    is_required = _is_required(column)

    if isinstance(column.type, Enum):
        enum_name = unique_name(
            pascal_case(names.models[table.name]) + pascal_case(name),
            names.types,
        )
        enums.append(create_enum(name=enum_name, values=column.type.enums))
        return create_object_field(name=name, type=enum_name, is_required=is_required)

    primary_keys = table.primary_key.columns.keys()
    is_id = primary_keys == [column.name]
    scalar_type = sql_to_scalar_type(column.type)
    return create_scalar_field(
        name=name,
        type=scalar_type,
        is_required=is_required,
        is_id=is_id,
        is_unique=not is_id and {column.name} in _unique_column_sets(table),
        default=(
            CallExpression(AUTO_INCREMENT)
            if is_id and scalar_type is ScalarType.INT
            else None
        ),
    )


def _relation_fields(tables: list[Table], names: _Names) -> dict[str, list[Field]]:
    """Build both sides of every foreign key, keyed by table name."""
    relations: dict[str, list[Field]] = defaultdict(list)
    pair_counts = Counter(
        frozenset((table.name, constraint.referred_table.name))
        for table in tables
        for constraint in table.foreign_key_constraints
    )

    for table in tables:
        source = names.models[table.name]
        for constraint in sorted(table.foreign_key_constraints, key=_constraint_key):
            target_table = constraint.referred_table
            target = names.models[target_table.name]
            local = [
                names.fields[table.name][column.name] for column in constraint.columns
            ]
            references = [
                names.fields[target_table.name][element.column.name]
                for element in constraint.elements
            ]
            is_self = table.name == target_table.name
            ambiguous = pair_counts[frozenset((table.name, target_table.name))] > 1

            relation_name = None
            forward_name, back_name = target, source
            if ambiguous:
                relation_name = f"{source}_{'_'.join(local)}To{target}"
                forward_name = f"{target}_{relation_name}"
                back_name = f"{source}_{relation_name}"
            elif is_self:
                relation_name = f"{source}To{target}"
            if is_self:
                back_name = f"other_{back_name}"

            is_one_to_one = {column.name for column in constraint.columns} in (
                _unique_column_sets(table)
            )
            relations[table.name].append(
                create_object_field(
                    name=unique_name(forward_name, names.taken[table.name]),
                    type=target,
                    is_required=all(map(_is_required, constraint.columns)),
                    relation_name=relation_name,
                    relation_fields=local,
                    relation_references=references,
                ),
            )
            relations[target_table.name].append(
                create_object_field(
                    name=unique_name(back_name, names.taken[target_table.name]),
                    type=source,
                    is_list=not is_one_to_one,
                    is_required=not is_one_to_one,
                    relation_name=relation_name,
                ),
            )
    return relations


def _constraint_key(constraint: ForeignKeyConstraint) -> tuple[str, ...]:
    return (constraint.referred_table.name, *(c.name for c in constraint.columns))


def sqlite_to_schema(sqlite_database: Engine) -> Schema:
    """Generate a schema AST from SQLite database using metadata reflection."""
    tables = reflect_tables(sqlite_database)
    logger.debug("Reflected %d tables from %s", len(tables), sqlite_database.url)

    names = _Names.claim(tables)
    enums: list[EnumNode] = []
    columns = {
        table.name: [
            _column_to_field(column, table, names, enums) for column in table.columns
        ]
        for table in tables
    }
    relations = _relation_fields(tables, names)

    models = [
        create_model(
            name=names.models[table.name],
            fields=[*columns[table.name], *relations[table.name]],
        )
        for table in tables
    ]
    logger.debug("Generated %d models and %d enums", len(models), len(enums))

    return create_schema(
        data_source=create_data_source(
            name="db",
            provider=DataSourceProvider.SQLITE,
            url=LiteralURL(f"file:{sqlite_database.url.database}"),
        ),
        generators=[create_generator(name="client", provider=GENERATOR_PROVIDER)],
        models=models,
        enums=enums,
    )
