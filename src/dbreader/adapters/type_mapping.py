"""
Type resolution system for result set columns.

This module maps the native type code a driver reports for a column to the
logical type the row materializer dispatches on. It combines:

1. Dialect-specific type codes (psycopg OIDs, SQLite declared types)
2. The generic SQL wire type codes those are normalized to
3. A total mapping from wire type (and numeric scale) to logical type

The module focuses solely on type identification, not conversion.
"""
import datetime
import decimal
import enum
import logging
from typing import Any

from dbreader.exceptions import UnknownTypeNameError, UnmappedTypeError

logger = logging.getLogger(__name__)


class LogicalType(enum.Enum):
    """Canonical value kinds a row is built from.
    """
    INTEGER = 'integer'
    FLOAT = 'float'
    DECIMAL = 'decimal'
    DATE = 'date'
    DATETIME = 'datetime'
    TIME = 'time'
    BOOLEAN = 'boolean'
    BYTE_ARRAY = 'byte_array'
    CLASS = 'class'
    OBJECT = 'object'
    NIL = 'nil'
    STRING = 'string'

    @classmethod
    def from_name(cls, name: str) -> 'LogicalType':
        """Validate an external type name, matched case-insensitively.
        """
        logical_type = _type_names.get(str(name).strip().lower())
        if logical_type is None:
            raise UnknownTypeNameError(f'Unknown column type name: {name!r}')
        return logical_type

    @classmethod
    def from_hint(cls, hint: Any) -> 'LogicalType':
        """Accept a LogicalType, a type name or a Python type.
        """
        if isinstance(hint, LogicalType):
            return hint
        if isinstance(hint, str):
            return cls.from_name(hint)
        if isinstance(hint, type):
            for python_type in hint.__mro__:
                if python_type in _python_types:
                    return _python_types[python_type]
        raise UnknownTypeNameError(f'Unknown column type hint: {hint!r}')


_type_names = {member.value: member for member in LogicalType}
_type_names.update({
    'int': LogicalType.INTEGER,
    'bigint': LogicalType.INTEGER,
    'fixnum': LogicalType.INTEGER,
    'bignum': LogicalType.INTEGER,
    'double': LogicalType.FLOAT,
    'bigdecimal': LogicalType.DECIMAL,
    'numeric': LogicalType.DECIMAL,
    'date_time': LogicalType.DATETIME,
    'timestamp': LogicalType.DATETIME,
    'bool': LogicalType.BOOLEAN,
    'trueclass': LogicalType.BOOLEAN,
    'bytes': LogicalType.BYTE_ARRAY,
    'bytearray': LogicalType.BYTE_ARRAY,
    'blob': LogicalType.BYTE_ARRAY,
    'type': LogicalType.CLASS,
    'none': LogicalType.NIL,
    'nonetype': LogicalType.NIL,
    'nilclass': LogicalType.NIL,
    'str': LogicalType.STRING,
    'text': LogicalType.STRING,
    })

# Ordered so that bool resolves before int and datetime before date
_python_types: dict[type, LogicalType] = {
    bool: LogicalType.BOOLEAN,
    int: LogicalType.INTEGER,
    float: LogicalType.FLOAT,
    decimal.Decimal: LogicalType.DECIMAL,
    datetime.datetime: LogicalType.DATETIME,
    datetime.date: LogicalType.DATE,
    datetime.time: LogicalType.TIME,
    bytes: LogicalType.BYTE_ARRAY,
    bytearray: LogicalType.BYTE_ARRAY,
    type: LogicalType.CLASS,
    type(None): LogicalType.NIL,
    str: LogicalType.STRING,
    object: LogicalType.OBJECT,
    }


class SqlType(enum.IntEnum):
    """Generic SQL wire type codes (X/Open CLI numbering).
    """
    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    TIME_WITH_TIMEZONE = 2013
    TIMESTAMP_WITH_TIMEZONE = 2014
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    JAVA_OBJECT = 2000
    DISTINCT = 2001
    STRUCT = 2002
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    REF = 2006
    DATALINK = 70
    BOOLEAN = 16
    ROWID = -8
    NCLOB = 2011
    SQLXML = 2009


logical_types: dict[SqlType, LogicalType] = {}
for v in [SqlType.TINYINT, SqlType.SMALLINT, SqlType.INTEGER, SqlType.BIGINT]:
    logical_types[v] = LogicalType.INTEGER
for v in [SqlType.FLOAT, SqlType.REAL, SqlType.DOUBLE]:
    logical_types[v] = LogicalType.FLOAT
for v in [SqlType.BIT, SqlType.BOOLEAN]:
    logical_types[v] = LogicalType.BOOLEAN
for v in [
    SqlType.CHAR,
    SqlType.VARCHAR,
    SqlType.LONGVARCHAR,
    SqlType.NCHAR,
    SqlType.NVARCHAR,
    SqlType.LONGNVARCHAR,
    SqlType.CLOB,
    SqlType.NCLOB,
    SqlType.SQLXML,
    SqlType.ROWID,
]:
    logical_types[v] = LogicalType.STRING
for v in [SqlType.TIME, SqlType.TIME_WITH_TIMEZONE]:
    logical_types[v] = LogicalType.TIME
for v in [SqlType.TIMESTAMP, SqlType.TIMESTAMP_WITH_TIMEZONE]:
    logical_types[v] = LogicalType.DATETIME
for v in [SqlType.BINARY, SqlType.VARBINARY, SqlType.LONGVARBINARY, SqlType.BLOB]:
    logical_types[v] = LogicalType.BYTE_ARRAY
logical_types[SqlType.DATE] = LogicalType.DATE
logical_types[SqlType.JAVA_OBJECT] = LogicalType.OBJECT
logical_types[SqlType.NULL] = LogicalType.NIL

# Exact numerics depend on scale
SCALED_TYPES = frozenset({SqlType.NUMERIC, SqlType.DECIMAL})


from psycopg.postgres import types


def _oid(name: str) -> int | None:
    info = types.get(name)
    return info.oid if info is not None else None


postgres_types: dict[int, SqlType] = {}
for name, sql_type in [
    ('int2', SqlType.SMALLINT),
    ('int4', SqlType.INTEGER),
    ('int8', SqlType.BIGINT),
    ('oid', SqlType.BIGINT),
    ('numeric', SqlType.NUMERIC),
    ('float4', SqlType.REAL),
    ('float8', SqlType.DOUBLE),
    ('bool', SqlType.BOOLEAN),
    ('"char"', SqlType.CHAR),
    ('bpchar', SqlType.CHAR),
    ('varchar', SqlType.VARCHAR),
    ('text', SqlType.LONGVARCHAR),
    ('name', SqlType.VARCHAR),
    ('uuid', SqlType.VARCHAR),
    ('json', SqlType.LONGVARCHAR),
    ('jsonb', SqlType.LONGVARCHAR),
    ('xml', SqlType.SQLXML),
    ('date', SqlType.DATE),
    ('time', SqlType.TIME),
    ('timetz', SqlType.TIME_WITH_TIMEZONE),
    ('timestamp', SqlType.TIMESTAMP),
    ('timestamptz', SqlType.TIMESTAMP_WITH_TIMEZONE),
    ('bytea', SqlType.LONGVARBINARY),
]:
    oid = _oid(name)
    if oid is not None:
        postgres_types[oid] = sql_type


sqlite_types: dict[str, SqlType] = {
    'INTEGER': SqlType.BIGINT,
    'INT': SqlType.INTEGER,
    'BIGINT': SqlType.BIGINT,
    'SMALLINT': SqlType.SMALLINT,
    'TINYINT': SqlType.TINYINT,
    'REAL': SqlType.REAL,
    'FLOAT': SqlType.DOUBLE,
    'DOUBLE': SqlType.DOUBLE,
    'NUMERIC': SqlType.NUMERIC,
    'DECIMAL': SqlType.DECIMAL,
    'TEXT': SqlType.LONGVARCHAR,
    'VARCHAR': SqlType.VARCHAR,
    'CHAR': SqlType.CHAR,
    'CLOB': SqlType.CLOB,
    'BLOB': SqlType.BLOB,
    'BOOLEAN': SqlType.BOOLEAN,
    'DATE': SqlType.DATE,
    'DATETIME': SqlType.TIMESTAMP,
    'TIMESTAMP': SqlType.TIMESTAMP,
    'TIME': SqlType.TIME,
    'PICKLE': SqlType.JAVA_OBJECT,
    }

# SQLite storage classes, used when a column has no declared type
sqlite_storage_types: dict[type, SqlType] = {
    type(None): SqlType.NULL,
    bool: SqlType.BOOLEAN,
    int: SqlType.BIGINT,
    float: SqlType.DOUBLE,
    str: SqlType.LONGVARCHAR,
    bytes: SqlType.BLOB,
    datetime.datetime: SqlType.TIMESTAMP,
    datetime.date: SqlType.DATE,
    datetime.time: SqlType.TIME,
    }


def _sqlite_affinity(base_type: str) -> SqlType:
    """Apply SQLite's column affinity rules to an unlisted declared type.
    """
    if 'INT' in base_type:
        return SqlType.BIGINT
    if any(name in base_type for name in ('CHAR', 'CLOB', 'TEXT')):
        return SqlType.LONGVARCHAR
    if 'BLOB' in base_type:
        return SqlType.BLOB
    if any(name in base_type for name in ('REAL', 'FLOA', 'DOUB')):
        return SqlType.DOUBLE
    return SqlType.NUMERIC


def parse_declared_type(declared: str) -> tuple[SqlType, int | None]:
    """Split a SQLite declared type such as 'NUMERIC(10,2)' into code and scale.
    """
    base_type, _, modifiers = declared.partition('(')
    base_type = base_type.strip().upper()
    sql_type = sqlite_types.get(base_type) or _sqlite_affinity(base_type)
    scale = None
    size = [part.strip() for part in modifiers.rstrip(')').split(',') if part.strip()]
    if len(size) == 2 and size[1].isdigit():
        scale = int(size[1])
    elif len(size) == 1 and sql_type in SCALED_TYPES and size[0].isdigit():
        scale = 0
    return sql_type, scale


class TypeResolver:
    """
    Resolves native column type codes to logical types.

    Resolution is a pure lookup in two steps: the dialect-specific code is
    normalized to a SqlType, and the SqlType (plus scale, for exact numerics)
    is mapped to a LogicalType. There is no fallback: an unmapped code raises
    UnmappedTypeError.
    """

    _instance = None

    @classmethod
    def get_instance(cls) -> 'TypeResolver':
        """Get singleton instance.
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def __init__(self) -> None:
        self._type_maps: dict[str, dict[Any, SqlType]] = {
            'postgresql': postgres_types,
            'sqlite': sqlite_types,
            }

    def native_type_code(self, dialect: str, type_code: Any) -> SqlType:
        """Normalize a dialect-specific type code to a SqlType.

        Unknown codes map to SqlType.OTHER, which the resolver rejects.
        """
        if isinstance(type_code, SqlType):
            return type_code
        if dialect == 'sqlite' and isinstance(type_code, str):
            return parse_declared_type(type_code)[0]
        sql_type = self._type_maps.get(dialect, {}).get(type_code)
        if sql_type is None:
            logger.debug(f'No {dialect} mapping for type code {type_code!r}')
            return SqlType.OTHER
        return sql_type

    def resolve(self, type_code: Any, scale: int | None = None) -> LogicalType:
        """Map a SqlType code and numeric scale to a LogicalType.
        """
        try:
            sql_type = SqlType(type_code)
        except (ValueError, TypeError):
            raise UnmappedTypeError(type_code, scale) from None

        if sql_type in SCALED_TYPES:
            return LogicalType.INTEGER if scale == 0 else LogicalType.DECIMAL

        logical_type = logical_types.get(sql_type)
        if logical_type is None:
            raise UnmappedTypeError(sql_type.name, scale)
        return logical_type


def resolve_type(type_code: Any, scale: int | None = None) -> LogicalType:
    """
    Central function for logical type resolution across the codebase.

    Args:
        type_code: SqlType (or its integer value) reported for the column
        scale: Numeric scale; decides between INTEGER and DECIMAL for NUMERIC/DECIMAL

    Returns
        LogicalType for the column

    Raises
        UnmappedTypeError when the code has no mapping
    """
    return TypeResolver.get_instance().resolve(type_code, scale)


def native_type_code(dialect: str, type_code: Any) -> SqlType:
    """Normalize a dialect-specific type code using the shared resolver.
    """
    return TypeResolver.get_instance().native_type_code(dialect, type_code)
