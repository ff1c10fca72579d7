"""Exceptions raised while building, printing and formatting schemas."""


class SchemaError(ValueError):
    """Base class for schema errors."""


class InvalidNameError(SchemaError):
    """Name is not a valid identifier."""


class OptionalListError(SchemaError):
    """Field combines ``is_list`` with ``is_required=False``."""


class InvalidDefaultError(SchemaError):
    """Default value does not fit the declared scalar type."""


class UnknownTypeError(SchemaError):
    """Scalar type is not one of the supported types."""


class InvalidValueError(SchemaError):
    """Default value has a shape the printer cannot render."""


class DefinitionError(SchemaError):
    """Schema definition document is malformed."""


class FormatterError(RuntimeError):
    """External formatter exited with an error."""
