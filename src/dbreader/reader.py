"""
Forward-only reader over a result set.

The reader owns the result set (and its statement) for its lifetime, advances
it one row at a time and materializes each row into a list of Python values,
using declared per-column types or types resolved from column metadata.
"""
import enum
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from dbreader.adapters.column_info import Column, columns_from_result_set
from dbreader.adapters.type_conversion import ValueConverter
from dbreader.adapters.type_mapping import LogicalType
from dbreader.exceptions import DriverError, DriverExceptions, ReaderStateError
from dbreader.exceptions import new_driver_error
from dbreader.options import ReaderOptions
from dbreader.resultset import DbapiResultSet, ResultSet
from dbreader.runtime import Runtime
from dbreader.utils import close_quietly

from libb import attrdict

logger = logging.getLogger(__name__)

__all__ = [
    'Reader',
    'ReaderState',
    'open_reader',
]


class ReaderState(enum.Enum):
    """Whether the last row may be read."""
    UNINITIALIZED = 'uninitialized'
    HAS_ROW = 'has_row'
    EXHAUSTED = 'exhausted'


@dataclass
class _ReaderFields:
    """Per-reader state, rebuilt row by row."""
    fields: list[str]
    field_count: int
    field_types: list[LogicalType] = field(default_factory=list)
    values: list[Any] | None = None
    columns: list[Column] | None = None
    state: ReaderState = ReaderState.UNINITIALIZED


class Reader:
    """Forward-only, row-at-a-time reader.

    Usage:
        with Reader(result_set, field_types=['integer', 'string']) as reader:
            while reader.next():
                print(reader.values())
    """

    def __init__(self, result_set: ResultSet,
                 fields: Sequence[str] | None = None,
                 field_types: Sequence[Any] | None = None,
                 options: ReaderOptions | None = None,
                 runtime: Runtime | None = None,
                 error_class: type[DriverError] = DriverError) -> None:
        """Initialize reader.

        Args:
            result_set: Open result set; the reader takes ownership of it and its statement
            fields: Optional field names (read from result set metadata if not provided)
            field_types: Optional per-column types: LogicalType, type names or Python types
            options: Optional reader options
            runtime: Optional runtime binding used to build caller values
            error_class: DriverError subclass raised for driver failures

        Raises
            UnknownTypeNameError for a field type that is not a known logical type
            ValueError when field_types does not match the column count
        """
        self.options = options or (runtime.options if runtime else ReaderOptions())
        self.runtime = runtime or Runtime(self.options)
        self.converter = ValueConverter(self.runtime, self.options)
        self.error_class = error_class
        self._result_set: ResultSet | None = result_set

        field_count = result_set.column_count
        if fields is None:
            fields = [result_set.column_name(col) for col in range(1, field_count + 1)]
        declared = [LogicalType.from_hint(hint) for hint in (field_types or [])]
        if declared and len(declared) != field_count:
            raise ValueError(f'Expected {field_count} field types, got {len(declared)}')

        self._state = _ReaderFields(fields=list(fields), field_count=field_count,
                                    field_types=declared)

    def __repr__(self) -> str:
        return (f'Reader(fields={self._state.fields!r}, '
                f'state={self._state.state.value}, closed={self.closed})')

    def __enter__(self) -> 'Reader':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __iter__(self) -> Iterator[list[Any]]:
        """Advance through the remaining rows, yielding each one."""
        while self.next():
            yield self.values()

    @property
    def closed(self) -> bool:
        return self._result_set is None

    @property
    def state(self) -> ReaderState:
        return self._state.state

    @property
    def field_types(self) -> list[LogicalType]:
        return list(self._state.field_types)

    def next(self) -> bool:
        """Move the cursor forward and materialize the new row.

        Returns True when a row was read and False once the result set is
        drained (or the reader is closed).

        Raises
            DriverError (or error_class) when the driver fails to advance or read a column
            UnmappedTypeError when a column type cannot be resolved
        """
        result_set = self._result_set
        if result_set is None or self._state.state is ReaderState.EXHAUSTED:
            return False

        self._state.values = None
        self._state.columns = None
        self._state.state = ReaderState.UNINITIALIZED
        try:
            if not result_set.next():
                self._state.state = ReaderState.EXHAUSTED
                return False

            columns = columns_from_result_set(result_set, self._state.field_types or None)
            row = []
            for column in columns:
                value = self.converter.convert(result_set, column.column, column.logical_type)
                row.append(value)
        except (*DriverExceptions, OSError) as exc:
            raise new_driver_error(self.error_class, exc) from exc

        logger.debug(f'Read row with {len(row)} columns')
        self._state.columns = columns
        self._state.values = row
        self._state.state = ReaderState.HAS_ROW
        return True

    advance = next

    def values(self) -> list[Any] | None:
        """Return the last materialized row.

        Raises
            ReaderStateError before the first row, after the last row or after close
        """
        if self.closed:
            raise ReaderStateError('Reader is closed')
        if self._state.state is not ReaderState.HAS_ROW:
            raise ReaderStateError('Reader is not initialized')
        return self._state.values

    current_row = values

    def row_dict(self) -> attrdict:
        """Return the last materialized row keyed by field name."""
        return attrdict(dict(zip(self._state.fields, self.values())))

    def fields(self) -> list[str]:
        """Field names, independent of row state."""
        return list(self._state.fields)

    def field_count(self) -> int:
        """Number of columns, independent of row state."""
        return self._state.field_count

    def columns(self) -> list[Column] | None:
        """Column descriptors of the last materialized row."""
        return self._state.columns

    def close(self) -> bool:
        """Close the result set and its statement.

        Both are closed even if one of them fails; failures are logged, not
        raised. The reader is left exhausted. Returns False when the reader
        was already closed.
        """
        result_set, self._result_set = self._result_set, None
        if result_set is None:
            return False

        statement = getattr(result_set, 'statement', None)
        try:
            close_quietly(result_set, 'result set')
        finally:
            close_quietly(statement, 'statement')
            self._state.values = None
            self._state.columns = None
            self._state.state = ReaderState.EXHAUSTED
        return True


def open_reader(cursor: Any, field_types: Sequence[Any] | None = None,
                fields: Sequence[str] | None = None,
                declared_types: Sequence[Any] | None = None,
                dialect: str | None = None, **kwargs: Any) -> Reader:
    """Build a Reader over an executed DB-API cursor.

    Args:
        cursor: Executed sqlite3 or psycopg cursor
        field_types: Optional per-column types for the reader
        fields: Optional field names
        declared_types: Optional SQLite declared column types used for type inference
        dialect: Optional dialect name (auto-detected if not provided)
        **kwargs: Passed to Reader (options, runtime, error_class)

    Returns
        Reader that owns the cursor
    """
    result_set = DbapiResultSet(cursor, dialect=dialect, declared_types=declared_types)
    return Reader(result_set, fields=fields, field_types=field_types, **kwargs)
