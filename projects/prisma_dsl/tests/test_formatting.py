"""Tests for the built-in and Prisma CLI formatters."""

from pathlib import Path

import pytest

from prisma_dsl.errors import FormatterError
from prisma_dsl.formatting import AlignFormatter, PrismaCliFormatter, format_schema

RAW_MODEL = """\
model Post {
id Int @id @default(autoincrement())
title String
author User @relation(fields: [authorId], references: [id])
authorId Int
}"""


def test_model_columns_aligned() -> None:
    """Test that names, types and attributes are aligned in columns."""
    assert format_schema(RAW_MODEL) == (
        "model Post {\n"
        "  id       Int    @id @default(autoincrement())\n"
        "  title    String\n"
        "  author   User   @relation(fields: [authorId], references: [id])\n"
        "  authorId Int\n"
        "}\n"
    )


def test_key_value_blocks_aligned() -> None:
    """Test that data source and generator assignments align their equals signs."""
    raw = (
        'generator client {\nprovider = "prisma-client-js"\n'
        'binaryTargets = ["native"]\n}'
    )
    assert format_schema(raw) == (
        "generator client {\n"
        '  provider      = "prisma-client-js"\n'
        '  binaryTargets = ["native"]\n'
        "}\n"
    )


def test_enum_values_indented() -> None:
    """Test that enum values are indented one level."""
    assert format_schema("enum Role {\nUSER\nADMIN\n}") == (
        "enum Role {\n  USER\n  ADMIN\n}\n"
    )


def test_documentation_kept_with_block() -> None:
    """Test that documentation stays directly above its block."""
    raw = "/// People\n\n\nmodel User {\n/// Primary key\nid Int @id\n}"
    assert format_schema(raw) == (
        "/// People\nmodel User {\n  /// Primary key\n  id Int @id\n}\n"
    )


def test_documentation_ending_in_brace() -> None:
    """Test that comments ending in an opening brace do not start a block."""
    raw = "/// Example {\nmodel A {\n/// shape: {\ndata Json\n}"
    assert format_schema(raw) == (
        "/// Example {\nmodel A {\n  /// shape: {\n  data Json\n}\n"
    )


def test_blocks_separated_by_one_blank_line() -> None:
    """Test that runs of blank lines between blocks collapse."""
    raw = "enum A {\nX\n}\n\n\n\nenum B {\nY\n}"
    assert format_schema(raw) == "enum A {\n  X\n}\n\nenum B {\n  Y\n}\n"


def test_blank_lines_split_alignment_groups() -> None:
    """Test that a blank line inside a block starts a new alignment group."""
    raw = "model User {\nid Int @id\n\nnickname String?\n}"
    assert format_schema(raw) == (
        "model User {\n  id Int @id\n\n  nickname String?\n}\n"
    )


def test_string_content_preserved() -> None:
    """Test that whitespace inside attribute arguments is left alone."""
    raw = 'model Note {\nbody String @default("two  spaces")\n}'
    assert format_schema(raw) == (
        'model Note {\n  body String @default("two  spaces")\n}\n'
    )


def test_format_is_idempotent() -> None:
    """Test that formatting formatted code changes nothing."""
    formatted = format_schema(RAW_MODEL)
    assert format_schema(formatted) == formatted


def test_empty_input() -> None:
    """Test that empty code stays empty."""
    assert format_schema("") == ""
    assert format_schema("\n\n") == ""


def test_unclosed_block() -> None:
    """Test that a block without closing brace is rejected."""
    with pytest.raises(FormatterError, match="Unclosed block"):
        format_schema("model User {\nid Int\n")


def test_unexpected_closing_brace() -> None:
    """Test that a stray closing brace is rejected."""
    with pytest.raises(FormatterError, match="Unexpected closing brace"):
        format_schema("}\n")


def test_nested_block() -> None:
    """Test that blocks cannot be nested."""
    with pytest.raises(FormatterError, match="Unexpected block start"):
        format_schema("model A {\nmodel B {\n}\n}")


@pytest.mark.asyncio
async def test_align_formatter() -> None:
    """Test that the async formatter wraps format_schema."""
    assert await AlignFormatter().format(RAW_MODEL) == format_schema(RAW_MODEL)


def _stub_prisma(tmp_path: Path, body: str) -> Path:
    """Write an executable shell script standing in for the Prisma CLI."""
    script = tmp_path / "prisma"
    script.write_text(f"#!/bin/sh\n{body}\n")
    script.chmod(0o755)
    return script


@pytest.mark.asyncio
async def test_prisma_cli_formatter_reads_back_file(tmp_path: Path) -> None:
    """Test that the formatted schema file is read back after the CLI ran."""
    # Called as: prisma format --schema <file>
    script = _stub_prisma(tmp_path, 'printf "formatted by prisma\\n" > "$3"')
    result = await PrismaCliFormatter(script).format(RAW_MODEL)
    assert result == "formatted by prisma\n"


@pytest.mark.asyncio
async def test_prisma_cli_formatter_passes_schema(tmp_path: Path) -> None:
    """Test that the CLI receives the raw schema text."""
    script = _stub_prisma(tmp_path, 'test "$1" = format && test "$2" = --schema')
    assert await PrismaCliFormatter(script).format(RAW_MODEL) == RAW_MODEL


@pytest.mark.asyncio
async def test_prisma_cli_formatter_failure(tmp_path: Path) -> None:
    """Test that a failing CLI raises with its error output."""
    script = _stub_prisma(tmp_path, 'echo "Schema validation error" >&2\nexit 1')
    with pytest.raises(FormatterError, match="Schema validation error"):
        await PrismaCliFormatter(script).format(RAW_MODEL)


@pytest.mark.asyncio
async def test_prisma_cli_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test the error raised when the Prisma CLI cannot be found."""
    monkeypatch.setattr("prisma_dsl.formatting.shutil.which", lambda _: None)
    with pytest.raises(FormatterError, match="Prisma CLI not found"):
        await PrismaCliFormatter().format(RAW_MODEL)
