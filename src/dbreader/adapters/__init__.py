"""
Reader adapters package.

This package provides the following components:

- type_mapping: Logical types, SQL wire type codes and type resolution (no conversion)
- column_info: Column metadata read from a result set
- type_conversion: Value conversion from result set columns to Python values

Type conversion principles:
1. Database -> Python only; parameters are never sent from here
2. A null cell is None for every logical type
3. Resolution never falls back to string; unmapped types raise
"""

from dbreader.adapters.column_info import Column, columns_from_result_set
from dbreader.adapters.type_conversion import TimestampRead, ValueConverter
from dbreader.adapters.type_conversion import copy_stream, read_timestamp
from dbreader.adapters.type_mapping import LogicalType, SqlType, TypeResolver
from dbreader.adapters.type_mapping import native_type_code, resolve_type
