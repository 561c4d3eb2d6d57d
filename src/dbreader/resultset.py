"""
Result set interface consumed by the reader, and its DB-API implementation.

A result set is a forward-only cursor with typed, 1-based column getters and
per-column metadata. DbapiResultSet implements it over an already executed
PEP-249 cursor from sqlite3 or psycopg.
"""
import datetime
import decimal
import io
import logging
from collections.abc import Sequence
from functools import wraps
from typing import IO, Any, Protocol, runtime_checkable

import dateutil.parser

from dbreader.adapters.type_mapping import SqlType, native_type_code
from dbreader.adapters.type_mapping import parse_declared_type
from dbreader.adapters.type_mapping import sqlite_storage_types
from dbreader.exceptions import DriverAccessError, DriverExceptions
from dbreader.utils import get_dialect_name

logger = logging.getLogger(__name__)

__all__ = [
    'ResultSet',
    'Statement',
    'DbapiResultSet',
]

INT64_MIN = -2 ** 63
INT64_MAX = 2 ** 63 - 1

_isoparser = dateutil.parser.isoparser()


@runtime_checkable
class Statement(Protocol):
    """Statement handle that owns a result set."""

    def close(self) -> None: ...


@runtime_checkable
class ResultSet(Protocol):
    """Forward-only result cursor with typed column access.

    Column positions are 1-based. Getters raise DriverAccessError when the
    value cannot be read as the requested type.
    """

    statement: Statement

    @property
    def column_count(self) -> int: ...

    def next(self) -> bool: ...
    def close(self) -> None: ...
    def column_name(self, col: int) -> str: ...
    def column_type(self, col: int) -> SqlType: ...
    def scale(self, col: int) -> int | None: ...
    def is_null(self, col: int) -> bool: ...
    def get_long(self, col: int) -> int: ...
    def get_decimal(self, col: int) -> decimal.Decimal: ...
    def get_date(self, col: int) -> datetime.date | None: ...
    def get_timestamp(self, col: int) -> datetime.datetime | None: ...
    def get_time(self, col: int) -> datetime.time | None: ...
    def get_boolean(self, col: int) -> bool: ...
    def get_binary_stream(self, col: int) -> IO[bytes]: ...
    def get_ascii_stream(self, col: int) -> IO[bytes]: ...
    def get_string(self, col: int) -> str | None: ...


def driver_access(func):
    """Decorator turning value coercion failures into DriverAccessError."""
    @wraps(func)
    def wrapper(self, col: int, *args: Any, **kwargs: Any):
        try:
            return func(self, col, *args, **kwargs)
        except DriverAccessError:
            raise
        except (ValueError, TypeError, ArithmeticError, OverflowError) as exc:
            raise DriverAccessError(
                f'Cannot read column {col} with {func.__name__}: {exc}') from exc
    return wrapper


def _as_text(value: Any) -> str:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).decode('utf-8')
    return str(value)


def _as_bytes(value: Any, encoding: str) -> bytes:
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    if isinstance(value, datetime.date | datetime.time):
        value = value.isoformat()
    return str(value).encode(encoding)


class DbapiResultSet:
    """Result set over an executed DB-API cursor.

    Native type codes come from the cursor description: psycopg reports type
    OIDs and numeric scale; SQLite reports nothing, so declared column types
    can be supplied, otherwise the storage class of the current value is used.
    """

    def __init__(self, cursor: Any, dialect: str | None = None,
                 declared_types: Sequence[str | SqlType] | None = None) -> None:
        """Initialize result set wrapper.

        Args:
            cursor: Executed DB-API cursor; closing the result set closes it as the statement
            dialect: Optional dialect name (auto-detected from the cursor if not provided)
            declared_types: Optional per-column declared types for SQLite
        """
        if cursor.description is None:
            raise DriverAccessError('Cursor has no result set')
        self.statement = cursor
        self.dialect = dialect or get_dialect_name(cursor)
        self._description = list(cursor.description)
        self._declared_types = list(declared_types) if declared_types else None
        if self._declared_types and len(self._declared_types) != len(self._description):
            raise ValueError(f'Expected {len(self._description)} declared types, '
                             f'got {len(self._declared_types)}')
        self._row: Sequence[Any] | None = None
        self._closed = False

    def __repr__(self) -> str:
        state = 'closed' if self._closed else 'open'
        return f'DbapiResultSet(dialect={self.dialect!r}, columns={self.column_count}, {state})'

    @property
    def column_count(self) -> int:
        """Number of columns in the result."""
        return len(self._description)

    @property
    def closed(self) -> bool:
        return self._closed

    def next(self) -> bool:
        """Fetch the next row; False once the cursor is drained."""
        if self._closed:
            raise DriverAccessError('Result set is closed')
        try:
            self._row = self.statement.fetchone()
        except DriverExceptions as exc:
            raise DriverAccessError(str(exc)) from exc
        return self._row is not None

    def close(self) -> None:
        """Release the buffered row; the statement is closed separately."""
        self._closed = True
        self._row = None

    def _description_item(self, col: int) -> Any:
        if not 1 <= col <= self.column_count:
            raise DriverAccessError(f'Column index {col} out of range 1..{self.column_count}')
        return self._description[col - 1]

    def _value(self, col: int) -> Any:
        self._description_item(col)
        if self._row is None:
            raise DriverAccessError('No current row')
        return self._row[col - 1]

    # metadata

    def column_name(self, col: int) -> str:
        item = self._description_item(col)
        return getattr(item, 'name', None) or item[0]

    def _declared(self, col: int) -> tuple[SqlType, int | None] | None:
        if not self._declared_types:
            return None
        declared = self._declared_types[col - 1]
        if isinstance(declared, SqlType):
            return declared, None
        return parse_declared_type(declared)

    def column_type(self, col: int) -> SqlType:
        """Native type of a column, normalized to a SqlType."""
        item = self._description_item(col)
        if self.dialect == 'sqlite':
            declared = self._declared(col)
            if declared is not None:
                return declared[0]
            value = None if self._row is None else self._row[col - 1]
            return sqlite_storage_types.get(type(value), SqlType.OTHER)
        return native_type_code(self.dialect, getattr(item, 'type_code', item[1]))

    def scale(self, col: int) -> int | None:
        item = self._description_item(col)
        if self.dialect == 'sqlite':
            declared = self._declared(col)
            return declared[1] if declared is not None else None
        return getattr(item, 'scale', None)

    def is_null(self, col: int) -> bool:
        return self._value(col) is None

    # typed getters

    @driver_access
    def get_long(self, col: int) -> int:
        value = self._value(col)
        if isinstance(value, str | bytes):
            value = decimal.Decimal(_as_text(value).strip())
        number = int(value)
        if not INT64_MIN <= number <= INT64_MAX:
            raise OverflowError(f'{number} does not fit in a 64-bit integer')
        return number

    @driver_access
    def get_decimal(self, col: int) -> decimal.Decimal:
        value = self._value(col)
        if isinstance(value, decimal.Decimal):
            return value
        if isinstance(value, float):
            return decimal.Decimal(repr(value))
        if isinstance(value, bool):
            return decimal.Decimal(int(value))
        return decimal.Decimal(_as_text(value).strip()
                               if isinstance(value, str | bytes) else value)

    @driver_access
    def get_date(self, col: int) -> datetime.date | None:
        value = self._value(col)
        if value is None:
            return None
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        return _isoparser.isoparse(_as_text(value).strip()).date()

    @driver_access
    def get_timestamp(self, col: int) -> datetime.datetime | None:
        value = self._value(col)
        if value is None:
            return None
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime.combine(value, datetime.time.min)
        return _isoparser.isoparse(_as_text(value).strip())

    @driver_access
    def get_time(self, col: int) -> datetime.time | None:
        value = self._value(col)
        if value is None:
            return None
        if isinstance(value, datetime.datetime):
            return value.timetz()
        if isinstance(value, datetime.time):
            return value
        if isinstance(value, datetime.timedelta):
            return (datetime.datetime.min + value).time()
        return _isoparser.parse_isotime(_as_text(value).strip())

    @driver_access
    def get_boolean(self, col: int) -> bool:
        value = self._value(col)
        if isinstance(value, str | bytes):
            return _as_text(value).strip().lower() in {'1', 't', 'true', 'y', 'yes', 'on'}
        return bool(value)

    @driver_access
    def get_binary_stream(self, col: int) -> IO[bytes]:
        return io.BytesIO(_as_bytes(self._value(col), 'utf-8'))

    @driver_access
    def get_ascii_stream(self, col: int) -> IO[bytes]:
        return io.BytesIO(_as_bytes(self._value(col), 'latin-1'))

    @driver_access
    def get_string(self, col: int) -> str | None:
        value = self._value(col)
        if value is None:
            return None
        if isinstance(value, datetime.date | datetime.time):
            return value.isoformat()
        return _as_text(value)
