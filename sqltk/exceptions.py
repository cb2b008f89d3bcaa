# sqltk/exceptions.py
"""
Exception hierarchy for sqltk.

Every error is raised at the point of detection and carries enough context
(parameter, column, record index) to locate the bad input. Nothing is retried
and no partial SQL is ever returned.
"""

from typing import Any, Optional


class SqltkError(Exception):
    """Base class for all sqltk errors."""


class ConfigError(SqltkError, TypeError):
    """
    Invalid call configuration: table, columns, data, sample or options.

    Attributes:
        parameter: Name of the offending parameter, e.g. 'table' or 'data'.
    """

    def __init__(self, parameter: str, message: Optional[str] = None):
        self.parameter = parameter
        if message is None:
            message = f"Invalid parameter '{parameter}'."
        super().__init__(message)


class MissingValueError(SqltkError, ValueError):
    """
    A non-nullable column resolved to no value after default resolution.

    Attributes:
        column: Column name that could not be resolved.
        index: Zero-based record index in a batch, None for a single record.
    """

    def __init__(self, column: str, index: Optional[int] = None):
        self.column = column
        self.index = index
        if index is None:
            message = f"Property '{column}' doesn't exist."
        else:
            message = f"Property '{column}' doesn't exist in record {index}."
        super().__init__(message)


class UnsupportedValueError(SqltkError, TypeError):
    """
    A value has no escaping rule (function, NaN/Infinity, circular JSON, ...).

    Attributes:
        value: The rejected value.
        index: Zero-based record index in a batch, when known.
    """

    def __init__(self, value: Any, reason: Optional[str] = None, index: Optional[int] = None):
        self.value = value
        self.index = index
        message = reason or f"Unsupported value type: {type(value).__name__}"
        if index is not None:
            message += f" (record {index})"
        super().__init__(message)


class FormatError(SqltkError, ValueError):
    """The safe formatter rejected a template/argument pairing."""
