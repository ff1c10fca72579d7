"""Tests for assembling and formatting complete schemas."""

import asyncio

import pytest

from prisma_dsl.builders import (
    create_data_source,
    create_enum,
    create_generator,
    create_model,
    create_object_field,
    create_scalar_field,
    create_schema,
)
from prisma_dsl.printer import print_schema, render_schema
from prisma_dsl.types import (
    AUTO_INCREMENT,
    CallExpression,
    DataSourceProvider,
    EnvReference,
    ScalarField,
    ScalarType,
    Schema,
)

RAW_BLOG_SCHEMA = """\
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

model User {
id Int @id @default(autoincrement())
email String @unique
role Role
posts Post[]
}

/// A blog post
model Post {
id Int @id @default(autoincrement())
title String
author User @relation(fields: [authorId], references: [id])
authorId Int
}

enum Role {
USER
ADMIN
}"""

FORMATTED_BLOG_SCHEMA = """\
datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

generator client {
  provider = "prisma-client-js"
}

model User {
  id    Int    @id @default(autoincrement())
  email String @unique
  role  Role
  posts Post[]
}

/// A blog post
model Post {
  id       Int    @id @default(autoincrement())
  title    String
  author   User   @relation(fields: [authorId], references: [id])
  authorId Int
}

enum Role {
  USER
  ADMIN
}
"""


def _id_field() -> ScalarField:
    return create_scalar_field(
        name="id",
        type=ScalarType.INT,
        is_required=True,
        is_id=True,
        default=CallExpression(AUTO_INCREMENT),
    )


@pytest.fixture(name="blog_schema")
def blog_schema_fixture() -> Schema:
    """Create a small blog schema using every kind of block."""
    user = create_model(
        name="User",
        fields=[
            _id_field(),
            create_scalar_field(
                name="email",
                type=ScalarType.STRING,
                is_required=True,
                is_unique=True,
            ),
            create_object_field(name="role", type="Role", is_required=True),
            create_object_field(
                name="posts",
                type="Post",
                is_list=True,
                is_required=True,
            ),
        ],
    )
    post = create_model(
        name="Post",
        documentation="A blog post",
        fields=[
            _id_field(),
            create_scalar_field(name="title", type=ScalarType.STRING, is_required=True),
            create_object_field(
                name="author",
                type="User",
                is_required=True,
                relation_fields=["authorId"],
                relation_references=["id"],
            ),
            create_scalar_field(name="authorId", type=ScalarType.INT, is_required=True),
        ],
    )
    return create_schema(
        models=[user, post],
        enums=[create_enum(name="Role", values=["USER", "ADMIN"])],
        data_source=create_data_source(
            name="db",
            provider=DataSourceProvider.POSTGRESQL,
            url=EnvReference("DATABASE_URL"),
        ),
        generators=[create_generator(name="client", provider="prisma-client-js")],
    )


class RecordingFormatter:
    """Formatter returning its input unchanged and remembering it."""

    def __init__(self) -> None:
        """Start without any formatted text."""
        self.received: list[str] = []

    async def format(self, schema: str) -> str:
        """Record the schema and return it as is."""
        self.received.append(schema)
        return schema


class FailingFormatter:
    """Formatter rejecting every schema."""

    async def format(self, schema: str) -> str:
        """Raise an error mentioning the schema length."""
        msg = f"cannot format {len(schema)} characters"
        raise RuntimeError(msg)


def test_render_statement_order(blog_schema: Schema) -> None:
    """Test data source, generators, models and enums separated by blank lines."""
    assert render_schema(blog_schema) == RAW_BLOG_SCHEMA


def test_render_is_deterministic(blog_schema: Schema) -> None:
    """Test that rendering the same tree twice gives identical text."""
    assert render_schema(blog_schema) == render_schema(blog_schema)


def test_render_empty_schema() -> None:
    """Test that an empty schema renders to an empty document."""
    assert render_schema(create_schema()) == ""


def test_render_without_data_source() -> None:
    """Test that a missing data source leaves no gap."""
    schema = create_schema(
        generators=[create_generator(name="client", provider="prisma-client-js")],
        enums=[create_enum(name="Color", values=["RED"])],
    )
    assert render_schema(schema) == (
        'generator client {\n  provider = "prisma-client-js"\n}\n\n'
        "enum Color {\nRED\n}"
    )


def test_render_multiple_generators() -> None:
    """Test that every generator is printed in order."""
    schema = create_schema(
        generators=[
            create_generator(name="client", provider="prisma-client-js"),
            create_generator(name="docs", provider="prisma-docs-generator"),
        ],
    )
    assert render_schema(schema) == (
        'generator client {\n  provider = "prisma-client-js"\n}\n\n'
        'generator docs {\n  provider = "prisma-docs-generator"\n}'
    )


@pytest.mark.asyncio
async def test_print_schema_uses_builtin_formatter(blog_schema: Schema) -> None:
    """Test that the default formatter aligns the raw text."""
    assert await print_schema(blog_schema) == FORMATTED_BLOG_SCHEMA


@pytest.mark.asyncio
async def test_print_schema_passes_raw_text(blog_schema: Schema) -> None:
    """Test that the formatter receives the rendered text and its result is kept."""
    formatter = RecordingFormatter()
    result = await print_schema(blog_schema, formatter)
    assert formatter.received == [RAW_BLOG_SCHEMA]
    assert result == RAW_BLOG_SCHEMA


@pytest.mark.asyncio
async def test_print_schema_propagates_formatter_errors(blog_schema: Schema) -> None:
    """Test that formatter failures reach the caller unchanged."""
    with pytest.raises(RuntimeError, match="cannot format"):
        await print_schema(blog_schema, FailingFormatter())


@pytest.mark.asyncio
async def test_print_empty_schema() -> None:
    """Test that an empty schema formats to an empty document."""
    assert await print_schema(create_schema()) == ""


@pytest.mark.asyncio
async def test_concurrent_prints_are_independent(blog_schema: Schema) -> None:
    """Test that concurrent calls each produce the output of their own tree."""
    enum_schema = create_schema(enums=[create_enum(name="Color", values=["RED"])])
    blog, colors = await asyncio.gather(
        print_schema(blog_schema),
        print_schema(enum_schema),
    )
    assert blog == FORMATTED_BLOG_SCHEMA
    assert colors == "enum Color {\n  RED\n}\n"
