"""Construction time checks shared by the builders."""

import math
import re

from prisma_dsl.errors import (
    InvalidDefaultError,
    InvalidNameError,
    OptionalListError,
    UnknownTypeError,
)
from prisma_dsl.types import (
    AUTO_INCREMENT,
    CUID,
    NOW,
    UUID,
    CallExpression,
    LiteralDefault,
    ScalarDefault,
    ScalarType,
)

NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

OPTIONAL_LIST_ERROR_MESSAGE = (
    "Invalid modifiers: You cannot combine isRequired: false and isList: true"
    " - optional lists are not supported."
)


def validate_name(name: str) -> None:
    """Check that the whole name is an identifier starting with a letter."""
    if not NAME_PATTERN.fullmatch(name):
        msg = (
            f'Invalid name: "{name}". Name must start with a letter and can '
            "contain only letters, numbers and underscores"
        )
        raise InvalidNameError(msg)


def validate_modifiers(*, is_required: bool, is_list: bool) -> None:
    """Reject optional lists, which the schema language cannot express."""
    if not is_required and is_list:
        raise OptionalListError(OPTIONAL_LIST_ERROR_MESSAGE)


def _is_literal(value: ScalarDefault, *types: type) -> bool:
    return (
        value is not None
        and value.kind == "literal"
        and isinstance(value.value, types)
    )


def _is_string(value: ScalarDefault) -> bool:
    return _is_literal(value, str)


def _is_boolean(value: ScalarDefault) -> bool:
    return _is_literal(value, bool)


def _is_number(value: ScalarDefault) -> bool:
    # bool is an int subclass but never a number default
    return (
        _is_literal(value, int, float)
        and not _is_boolean(value)
        and math.isfinite(value.value)
    )


def _is_call(value: ScalarDefault, *callees: str) -> bool:
    return value is not None and value.kind == "call" and value.callee in callees


def validate_scalar_default(
    scalar_type: ScalarType | str,
    value: ScalarDefault,
) -> None:
    """Check that a default value has a shape accepted by the scalar type.

    Absent defaults always pass. Call expressions are only accepted for the
    generator functions that make sense for the type:

        String   -> uuid(), cuid()
        Int      -> autoincrement()
        DateTime -> now()
    """
    if value is None:
        return
    if not isinstance(value, LiteralDefault | CallExpression):
        msg = f"Invalid default value: {value!r}"
        raise InvalidDefaultError(msg)

    match scalar_type:
        case ScalarType.STRING:
            if not (_is_string(value) or _is_call(value, UUID, CUID)):
                msg = (
                    "Default must be a string or a call expression to uuid() or cuid()"
                )
                raise InvalidDefaultError(msg)
        case ScalarType.BOOLEAN:
            if not _is_boolean(value):
                msg = "Default must be a boolean"
                raise InvalidDefaultError(msg)
        case ScalarType.INT:
            if not (_is_number(value) or _is_call(value, AUTO_INCREMENT)):
                msg = "Default must be a number or call expression to autoincrement()"
                raise InvalidDefaultError(msg)
        case ScalarType.FLOAT:
            if not _is_number(value):
                msg = "Default must be a number"
                raise InvalidDefaultError(msg)
        case ScalarType.DATETIME:
            if not (_is_string(value) or _is_call(value, NOW)):
                msg = "Default must be a date-time string or a call expression to now()"
                raise InvalidDefaultError(msg)
        case ScalarType.JSON:
            if not _is_string(value):
                msg = "Default must be a JSON string"
                raise InvalidDefaultError(msg)
        case _:
            msg = f"Unknown type {scalar_type}"
            raise UnknownTypeError(msg)
