"""
Reader-specific exception classes.
"""
import sqlite3
from typing import Any

import psycopg


class ReaderError(Exception):
    """Base class for all reader module errors.
    """


class DriverError(ReaderError):
    """Caller-visible error for a failure in the underlying driver.

    The originating driver exception, when there is one, is kept on `cause`
    and chained as `__cause__`.
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DriverAccessError(ReaderError):
    """Failure reported by a result set while advancing or reading a column.
    """


class UnmappedTypeError(ReaderError):
    """Native column type with no logical type mapping.
    """

    def __init__(self, type_code: Any, scale: int | None = None) -> None:
        super().__init__(f'Problem automatically mapping native type {type_code!r} '
                         f'(scale={scale}) to a logical type')
        self.type_code = type_code
        self.scale = scale


class UnknownTypeNameError(ReaderError, ValueError):
    """Declared column type name that is not a known logical type.
    """


class ReaderStateError(ReaderError):
    """Reader used out of order (no current row, or already closed).
    """


DriverExceptions = (
    sqlite3.Error,
    psycopg.Error,
    DriverAccessError,
    )


def new_driver_error(error_class: type[DriverError],
                     cause: BaseException | str) -> DriverError:
    """Build the caller-visible error for a driver exception or a message.

    Exceptions keep their message and are attached as the cause; plain strings
    become the message.
    """
    if isinstance(cause, BaseException):
        message = str(cause) or type(cause).__name__
        error = error_class(message, cause)
        error.__cause__ = cause
        return error
    return error_class(cause)
