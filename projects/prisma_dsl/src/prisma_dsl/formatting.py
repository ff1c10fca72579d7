"""Formatters turning raw schema code into canonical, aligned code."""

from __future__ import annotations

import asyncio
import shutil
import tempfile
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import Protocol

from prisma_dsl.errors import FormatterError

logger = getLogger(__name__)

INDENT = "  "
KEY_VALUE_BLOCKS = {"datasource", "generator"}


class Formatter(Protocol):
    """Anything that can format schema code asynchronously."""

    async def format(self, schema: str) -> str:
        """Return the formatted version of the schema code."""
        ...


@dataclass
class _Block:
    header: str
    members: list[str] = field(default_factory=list)

    @property
    def keyword(self) -> str:
        return self.header.split(maxsplit=1)[0]


def _is_comment(line: str) -> bool:
    return line.startswith("//")


def _align_columns(lines: list[str]) -> list[str]:
    """Align ``name type attributes`` columns of consecutive member lines."""
    rows = [line.split(maxsplit=2) for line in lines]
    name_width = max((len(row[0]) for row in rows if len(row) > 1), default=0)
    type_width = max((len(row[1]) for row in rows if len(row) > 1), default=0)

    aligned = []
    for row in rows:
        match row:
            case [name, type_, attributes]:
                aligned.append(
                    f"{name.ljust(name_width)} {type_.ljust(type_width)} {attributes}",
                )
            case [name, type_]:
                aligned.append(f"{name.ljust(name_width)} {type_}")
            case _:
                aligned.append(" ".join(row))
    return aligned


def _align_assignments(lines: list[str]) -> list[str]:
    """Align the ``=`` of consecutive ``key = value`` lines."""
    pairs = [tuple(part.strip() for part in line.split("=", 1)) for line in lines]
    key_width = max((len(pair[0]) for pair in pairs), default=0)
    return [
        (
            f"{pair[0].ljust(key_width)} = {pair[1]}"
            if len(pair) == 2  # noqa: PLR2004
            else pair[0]
        )
        for pair in pairs
    ]


def _format_members(block: _Block) -> list[str]:
    """Indent block members, aligning each run of lines between blank lines."""
    align = _align_assignments if block.keyword in KEY_VALUE_BLOCKS else _align_columns
    formatted: list[str] = []
    run: list[str] = []

    def flush() -> None:
        # Comments keep their place but are left out of the alignment
        aligned = iter(align([line for line in run if not _is_comment(line)]))
        formatted.extend(
            INDENT + (line if _is_comment(line) else next(aligned)) for line in run
        )
        run.clear()

    for line in block.members:
        if line:
            run.append(line)
            continue
        if run:
            flush()
            formatted.append("")
    flush()

    while formatted and not formatted[-1]:
        formatted.pop()
    return [line.rstrip() for line in formatted]


def format_schema(schema: str) -> str:
    """Canonically indent and align schema code.

    Top level statements are separated by one blank line, documentation stays
    attached to the statement below it and the result ends with a newline.
    Formatting already formatted code returns it unchanged.
    """
    statements: list[list[str]] = []
    pending: list[str] = []
    block: _Block | None = None

    for raw_line in schema.splitlines():
        line = raw_line.strip()
        if block is not None:
            if line == "}":
                statements.append(
                    [*pending, block.header, *_format_members(block), "}"],
                )
                pending = []
                block = None
            elif line.endswith("{") and not _is_comment(line):
                msg = f"Unexpected block start inside {block.header!r}: {line!r}"
                raise FormatterError(msg)
            else:
                block.members.append(line)
        elif line.endswith("{") and not _is_comment(line):
            block = _Block(header=line)
        elif line == "}":
            msg = "Unexpected closing brace"
            raise FormatterError(msg)
        elif line:
            pending.append(line)

    if block is not None:
        msg = f"Unclosed block {block.header!r}"
        raise FormatterError(msg)
    if pending:
        statements.append(pending)

    if not statements:
        return ""
    return "\n\n".join("\n".join(statement) for statement in statements) + "\n"


class AlignFormatter:
    """Built-in formatter, see :func:`format_schema`."""

    async def format(self, schema: str) -> str:
        """Format the schema code."""
        return format_schema(schema)


class PrismaCliFormatter:
    """Formatter running ``prisma format`` on a temporary schema file."""

    def __init__(self, executable: str | Path | None = None) -> None:
        """Use the given executable, or look up ``prisma`` on the PATH."""
        self.executable = str(executable) if executable else shutil.which("prisma")

    async def format(self, schema: str) -> str:
        """Format the schema code with the Prisma CLI."""
        if not self.executable:
            msg = "Prisma CLI not found, install it or pass the executable path"
            raise FormatterError(msg)

        with tempfile.TemporaryDirectory() as directory:
            schema_path = Path(directory) / "schema.prisma"
            await asyncio.to_thread(schema_path.write_text, schema)

            logger.debug("Running %s format on %s", self.executable, schema_path)
            process = await asyncio.create_subprocess_exec(
                self.executable,
                "format",
                "--schema",
                str(schema_path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await process.communicate()

            if process.returncode != 0:
                msg = (
                    f"prisma format exited with code {process.returncode}: "
                    f"{stderr.decode().strip()}"
                )
                raise FormatterError(msg)

            return await asyncio.to_thread(schema_path.read_text)
