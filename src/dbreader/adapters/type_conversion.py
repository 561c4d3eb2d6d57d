"""
Value conversion from result set columns to caller-native values.

This module handles the Database -> Python direction only. Given a result set
positioned on a row, a 1-based column and a LogicalType, it pulls the matching
typed getter and converts the value to the canonical value model:

1. A null cell is always None, whatever the logical type
2. Text read from the database is tainted (see dbreader.runtime.TaintedStr)
3. Binary columns are copied out of their stream, which is always closed
4. An all-zero datetime the driver refuses to read becomes None
5. A serialized object that cannot be deserialized becomes None (logged)

Usage:
    converter = ValueConverter()
    value = converter.convert(result_set, 1, LogicalType.INTEGER)
"""
import contextlib
import datetime
import logging
from typing import Any, NamedTuple

from dbreader.adapters.type_mapping import LogicalType, SqlType
from dbreader.exceptions import DriverAccessError
from dbreader.options import ReaderOptions
from dbreader.runtime import Runtime

logger = logging.getLogger(__name__)

__all__ = [
    'ValueConverter',
    'TimestampRead',
    'read_timestamp',
    'copy_stream',
]


class TimestampRead(NamedTuple):
    """Outcome of a timestamp read.

    `recovered` is set when the driver raised on the read and the value was
    taken as null instead.
    """
    value: datetime.datetime | None
    recovered: bool = False
    error: DriverAccessError | None = None


def read_timestamp(result_set: Any, col: int, tolerate: bool = True) -> TimestampRead:
    """Read a timestamp column, recovering from the all-zero datetime quirk.

    Drivers refuse datetimes with all-zero components ('0000-00-00 00:00:00')
    and raise on the read. That read is reported as a recovered null. Only
    DriverAccessError is recovered, and only when `tolerate` is set.
    """
    try:
        return TimestampRead(result_set.get_timestamp(col))
    except DriverAccessError as exc:
        if not tolerate:
            raise
        return TimestampRead(None, recovered=True, error=exc)


def copy_stream(stream: Any, buffer_size: int = 2048) -> bytearray:
    """Copy a binary stream fully into an owned buffer.

    The stream is closed on every exit path, including a failed read.
    """
    with contextlib.closing(stream):
        data = bytearray()
        while True:
            chunk = stream.read(buffer_size)
            if not chunk:
                break
            data += chunk
    return data


class ValueConverter:
    """Converts result set columns to caller-native values.

    Dispatch is on LogicalType; each handler receives the result set and the
    1-based column and returns the converted value. Null cells never reach a
    handler.
    """

    def __init__(self, runtime: Runtime | None = None,
                 options: ReaderOptions | None = None) -> None:
        self.options = options or (runtime.options if runtime else ReaderOptions())
        self.runtime = runtime or Runtime(self.options)
        self._handlers = {
            LogicalType.INTEGER: self._convert_integer,
            LogicalType.FLOAT: self._convert_float,
            LogicalType.DECIMAL: self._convert_decimal,
            LogicalType.DATE: self._convert_date,
            LogicalType.DATETIME: self._convert_datetime,
            LogicalType.TIME: self._convert_time,
            LogicalType.BOOLEAN: self._convert_boolean,
            LogicalType.BYTE_ARRAY: self._convert_byte_array,
            LogicalType.CLASS: self._convert_class,
            LogicalType.OBJECT: self._convert_object,
            LogicalType.NIL: self._convert_nil,
            LogicalType.STRING: self._convert_string,
            }

    def convert(self, result_set: Any, col: int, logical_type: LogicalType) -> Any:
        """Convert one column of the current row.

        Args:
            result_set: Result set positioned on a row
            col: 1-based column
            logical_type: Logical type to convert to

        Returns
            Converted value, or None for a null cell

        Raises
            DriverAccessError when the underlying read fails
            OSError when copying a stream fails
        """
        if result_set is None or result_set.is_null(col):
            return None
        handler = self._handlers.get(logical_type, self._convert_string)
        return handler(result_set, col)

    def _convert_integer(self, result_set: Any, col: int) -> int:
        # No narrowing by magnitude; everything is read as 64-bit
        return result_set.get_long(col)

    def _convert_float(self, result_set: Any, col: int) -> float:
        return float(result_set.get_decimal(col))

    def _convert_decimal(self, result_set: Any, col: int) -> Any:
        return result_set.get_decimal(col)

    def _convert_date(self, result_set: Any, col: int) -> datetime.date | None:
        return result_set.get_date(col)

    def _convert_datetime(self, result_set: Any, col: int) -> datetime.datetime | None:
        read = read_timestamp(result_set, col, self.options.tolerate_zero_datetime)
        if read.recovered:
            if self.options.log_recovered_reads:
                logger.warning(f'Read column {col} as None after driver error: {read.error}')
            else:
                logger.debug(f'Read column {col} as None after driver error: {read.error}')
        return read.value

    def _convert_time(self, result_set: Any, col: int) -> Any:
        """Convert by the column's actual native type, not the declared one.
        """
        native_type = result_set.column_type(col)
        if native_type in {SqlType.TIME, SqlType.TIME_WITH_TIMEZONE}:
            return result_set.get_time(col)
        if native_type == SqlType.DATE:
            day = result_set.get_date(col)
            if day is None:
                return None
            return datetime.datetime.combine(day, datetime.time.min)
        return self._convert_string(result_set, col)

    def _convert_boolean(self, result_set: Any, col: int) -> bool:
        return result_set.get_boolean(col)

    def _convert_byte_array(self, result_set: Any, col: int) -> Any:
        stream = result_set.get_binary_stream(col)
        data = copy_stream(stream, self.options.blob_buffer_size)
        return self.runtime.new_byte_array(data)

    def _convert_class(self, result_set: Any, col: int) -> type | None:
        name = result_set.get_string(col)
        if name is None:
            return None
        name = self.runtime.taint(name)
        try:
            return self.runtime.resolve_class(name)
        except (NameError, TypeError) as exc:
            raise DriverAccessError(f'Cannot resolve class {name!r} in column {col}: {exc}') from exc

    def _convert_object(self, result_set: Any, col: int) -> Any:
        """Deserialize an object column.

        A payload that cannot be read or unpickled is logged and read as None.
        """
        stream = result_set.get_ascii_stream(col)
        with contextlib.closing(stream):
            try:
                return self.runtime.load_object(stream)
            except Exception as exc:
                logger.warning(f'Could not deserialize object in column {col}: {exc}')
                return None

    def _convert_nil(self, result_set: Any, col: int) -> None:
        return None

    def _convert_string(self, result_set: Any, col: int) -> str | None:
        text = result_set.get_string(col)
        if text is None:
            return None
        return self.runtime.taint(text)
