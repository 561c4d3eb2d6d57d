"""
Typed, forward-only reader over SQL result cursors.

A Reader drains a result set row by row and converts every column to a Python
value, either from declared column types or from types inferred from the
column's native type code:

    reader = dbreader.open_reader(cursor, field_types=['integer', 'string', 'date'])
    while reader.next():
        row = reader.values()
    reader.close()

Text values are returned as TaintedStr so they can be recognized as untrusted
input; binary values as ByteArray.
"""
__version__ = '0.1.0'

from dbreader.adapters import Column, LogicalType, SqlType, ValueConverter
from dbreader.adapters import resolve_type
from dbreader.exceptions import DriverAccessError, DriverError, ReaderError
from dbreader.exceptions import ReaderStateError, UnknownTypeNameError
from dbreader.exceptions import UnmappedTypeError
from dbreader.options import ReaderOptions
from dbreader.reader import Reader, ReaderState, open_reader
from dbreader.resultset import DbapiResultSet, ResultSet
from dbreader.runtime import ByteArray, Runtime, TaintedStr, is_tainted

__all__ = [
    'Reader',
    'ReaderState',
    'open_reader',
    'ResultSet',
    'DbapiResultSet',
    'ReaderOptions',
    'Runtime',
    'TaintedStr',
    'ByteArray',
    'is_tainted',
    'Column',
    'LogicalType',
    'SqlType',
    'ValueConverter',
    'resolve_type',
    'ReaderError',
    'DriverError',
    'DriverAccessError',
    'UnmappedTypeError',
    'UnknownTypeNameError',
    'ReaderStateError',
]
