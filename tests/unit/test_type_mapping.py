"""
Tests for logical type resolution from native column type codes.
"""
import datetime
import decimal

import pytest
from dbreader.adapters.type_mapping import LogicalType, SqlType, TypeResolver
from dbreader.adapters.type_mapping import logical_types, native_type_code
from dbreader.adapters.type_mapping import parse_declared_type, resolve_type
from dbreader.exceptions import UnknownTypeNameError, UnmappedTypeError
from dbreader.runtime import ByteArray, TaintedStr


def test_resolve_integer_family():
    """Test integer wire types resolve to INTEGER"""
    for sql_type in (SqlType.TINYINT, SqlType.SMALLINT, SqlType.INTEGER, SqlType.BIGINT):
        assert resolve_type(sql_type) == LogicalType.INTEGER


def test_resolve_exact_numerics_by_scale():
    """Test NUMERIC/DECIMAL resolve by scale"""
    assert resolve_type(SqlType.NUMERIC, 0) == LogicalType.INTEGER
    assert resolve_type(SqlType.DECIMAL, 0) == LogicalType.INTEGER
    assert resolve_type(SqlType.NUMERIC, 2) == LogicalType.DECIMAL
    assert resolve_type(SqlType.DECIMAL, 4) == LogicalType.DECIMAL

    # Unknown scale keeps the exact value
    assert resolve_type(SqlType.NUMERIC, None) == LogicalType.DECIMAL


def test_resolve_basic_types():
    """Test the remaining mapped wire types"""
    assert resolve_type(SqlType.DOUBLE) == LogicalType.FLOAT
    assert resolve_type(SqlType.REAL) == LogicalType.FLOAT
    assert resolve_type(SqlType.FLOAT) == LogicalType.FLOAT
    assert resolve_type(SqlType.BIT) == LogicalType.BOOLEAN
    assert resolve_type(SqlType.BOOLEAN) == LogicalType.BOOLEAN
    assert resolve_type(SqlType.VARCHAR) == LogicalType.STRING
    assert resolve_type(SqlType.CLOB) == LogicalType.STRING
    assert resolve_type(SqlType.DATE) == LogicalType.DATE
    assert resolve_type(SqlType.TIME) == LogicalType.TIME
    assert resolve_type(SqlType.TIMESTAMP) == LogicalType.DATETIME
    assert resolve_type(SqlType.TIMESTAMP_WITH_TIMEZONE) == LogicalType.DATETIME
    assert resolve_type(SqlType.LONGVARBINARY) == LogicalType.BYTE_ARRAY
    assert resolve_type(SqlType.BLOB) == LogicalType.BYTE_ARRAY
    assert resolve_type(SqlType.JAVA_OBJECT) == LogicalType.OBJECT
    assert resolve_type(SqlType.NULL) == LogicalType.NIL


def test_resolve_accepts_integer_codes():
    """Test raw integer codes resolve like their SqlType"""
    assert resolve_type(4) == LogicalType.INTEGER
    assert resolve_type(12) == LogicalType.STRING
    assert resolve_type(91) == LogicalType.DATE


def test_every_code_resolves_or_raises():
    """Test the resolver is total: a logical type or UnmappedTypeError, never a string fallback"""
    unmapped = {SqlType.OTHER, SqlType.DISTINCT, SqlType.STRUCT, SqlType.ARRAY,
                SqlType.REF, SqlType.DATALINK}
    for sql_type in SqlType:
        if sql_type in unmapped:
            with pytest.raises(UnmappedTypeError):
                resolve_type(sql_type)
        else:
            assert isinstance(resolve_type(sql_type, 2), LogicalType)


def test_unmapped_codes_raise():
    """Test unknown codes raise instead of defaulting to STRING"""
    with pytest.raises(UnmappedTypeError, match='OTHER'):
        resolve_type(SqlType.OTHER)
    with pytest.raises(UnmappedTypeError):
        resolve_type(99999)
    with pytest.raises(UnmappedTypeError):
        resolve_type(None)

    try:
        resolve_type(SqlType.ARRAY, 3)
    except UnmappedTypeError as e:
        assert e.scale == 3


def test_mapping_table_has_no_scaled_entries():
    """Test exact numerics are only decided by scale"""
    assert SqlType.NUMERIC not in logical_types
    assert SqlType.DECIMAL not in logical_types


def test_logical_type_from_name():
    """Test external type names are matched case-insensitively"""
    assert LogicalType.from_name('Integer') == LogicalType.INTEGER
    assert LogicalType.from_name('STRING') == LogicalType.STRING
    assert LogicalType.from_name('BigDecimal') == LogicalType.DECIMAL
    assert LogicalType.from_name('DateTime') == LogicalType.DATETIME
    assert LogicalType.from_name('TrueClass') == LogicalType.BOOLEAN
    assert LogicalType.from_name('byte_array') == LogicalType.BYTE_ARRAY
    assert LogicalType.from_name('NilClass') == LogicalType.NIL
    assert LogicalType.from_name(' str ') == LogicalType.STRING


def test_logical_type_from_name_unknown():
    """Test unknown type names fail fast"""
    with pytest.raises(UnknownTypeNameError, match='Widget'):
        LogicalType.from_name('Widget')

    # Also usable as a ValueError at the boundary
    with pytest.raises(ValueError):
        LogicalType.from_name('')


def test_logical_type_from_hint():
    """Test hints given as Python types or LogicalType members"""
    assert LogicalType.from_hint(LogicalType.TIME) == LogicalType.TIME
    assert LogicalType.from_hint(int) == LogicalType.INTEGER
    assert LogicalType.from_hint(bool) == LogicalType.BOOLEAN
    assert LogicalType.from_hint(float) == LogicalType.FLOAT
    assert LogicalType.from_hint(decimal.Decimal) == LogicalType.DECIMAL
    assert LogicalType.from_hint(datetime.datetime) == LogicalType.DATETIME
    assert LogicalType.from_hint(datetime.date) == LogicalType.DATE
    assert LogicalType.from_hint(datetime.time) == LogicalType.TIME
    assert LogicalType.from_hint(bytes) == LogicalType.BYTE_ARRAY
    assert LogicalType.from_hint(ByteArray) == LogicalType.BYTE_ARRAY
    assert LogicalType.from_hint(str) == LogicalType.STRING
    assert LogicalType.from_hint(TaintedStr) == LogicalType.STRING
    assert LogicalType.from_hint(type) == LogicalType.CLASS
    assert LogicalType.from_hint(type(None)) == LogicalType.NIL
    assert LogicalType.from_hint(object) == LogicalType.OBJECT
    assert LogicalType.from_hint('date') == LogicalType.DATE

    with pytest.raises(UnknownTypeNameError):
        LogicalType.from_hint(42)


def test_postgres_native_codes():
    """Test psycopg OIDs normalize to wire types"""
    assert native_type_code('postgresql', 23) == SqlType.INTEGER  # int4
    assert native_type_code('postgresql', 20) == SqlType.BIGINT  # int8
    assert native_type_code('postgresql', 25) == SqlType.LONGVARCHAR  # text
    assert native_type_code('postgresql', 16) == SqlType.BOOLEAN  # bool
    assert native_type_code('postgresql', 1700) == SqlType.NUMERIC  # numeric
    assert native_type_code('postgresql', 1082) == SqlType.DATE  # date
    assert native_type_code('postgresql', 1083) == SqlType.TIME  # time
    assert native_type_code('postgresql', 1114) == SqlType.TIMESTAMP  # timestamp
    assert native_type_code('postgresql', 17) == SqlType.LONGVARBINARY  # bytea

    # Unknown OIDs are OTHER, which does not resolve
    assert native_type_code('postgresql', 99999) == SqlType.OTHER
    with pytest.raises(UnmappedTypeError):
        resolve_type(native_type_code('postgresql', 99999))


def test_sqlite_declared_types():
    """Test SQLite declared types, with and without modifiers"""
    assert parse_declared_type('INTEGER') == (SqlType.BIGINT, None)
    assert parse_declared_type('text') == (SqlType.LONGVARCHAR, None)
    assert parse_declared_type('NUMERIC(10,2)') == (SqlType.NUMERIC, 2)
    assert parse_declared_type('DECIMAL(12, 0)') == (SqlType.DECIMAL, 0)
    assert parse_declared_type('NUMERIC(10)') == (SqlType.NUMERIC, 0)
    assert parse_declared_type('VARCHAR(255)') == (SqlType.VARCHAR, None)
    assert parse_declared_type('DATETIME') == (SqlType.TIMESTAMP, None)

    # SQLite affinity rules for names outside the table
    assert parse_declared_type('UNSIGNED BIG INT')[0] == SqlType.BIGINT
    assert parse_declared_type('NATIVE CHARACTER(70)')[0] == SqlType.LONGVARCHAR
    assert parse_declared_type('DOUBLE PRECISION')[0] == SqlType.DOUBLE
    assert parse_declared_type('MONEY')[0] == SqlType.NUMERIC


def test_native_code_passthrough():
    """Test SqlType codes pass through for any dialect"""
    assert native_type_code('sqlite', SqlType.TIME) == SqlType.TIME
    assert native_type_code('mysql', SqlType.DATE) == SqlType.DATE
    assert native_type_code('sqlite', 'NUMERIC(8,3)') == SqlType.NUMERIC


def test_resolver_singleton():
    """Test the shared resolver instance"""
    assert TypeResolver.get_instance() is TypeResolver.get_instance()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
