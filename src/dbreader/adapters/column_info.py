"""
Column information read from result set metadata.
"""
import logging
from typing import Any, Self

from dbreader.adapters.type_mapping import LogicalType, SqlType, resolve_type

logger = logging.getLogger(__name__)


class Column:
    """Representation of a result column with type information

    Technical implementation details:
    - Built from result set metadata on demand; never cached across rows
    - `position` is the 0-based index in the caller-facing row, while the
      result set is addressed with the 1-based `column`
    - `logical_type` is the declared type when one was supplied, otherwise the
      type resolved from `type_code` and `scale`
    """

    def __init__(self,
                 name: str,
                 position: int,
                 type_code: SqlType | None = None,
                 scale: int | None = None,
                 logical_type: LogicalType | None = None,
                 declared: bool = False):
        """
        Initialize column information

        Args:
            name: Display name of the column
            position: 0-based position in the row
            type_code: Native type reported by the result set
            scale: Numeric scale (for exact numeric types)
            logical_type: Logical type values of this column are converted to
            declared: Whether logical_type came from a caller declaration
        """
        self.name = name
        self.position = position
        self.type_code = type_code
        self.scale = scale
        self.logical_type = logical_type
        self.declared = declared

    @property
    def column(self) -> int:
        """1-based position used when addressing the result set."""
        return self.position + 1

    @classmethod
    def from_result_set(cls, result_set: Any, position: int,
                        declared_type: LogicalType | None = None) -> Self:
        """Create a Column from result set metadata.

        Args:
            result_set: Result set positioned on the row being read
            position: 0-based column position
            declared_type: Optional caller-declared logical type

        Returns
            Column instance

        Raises
            UnmappedTypeError when no type was declared and the native type has no mapping
        """
        col = position + 1
        type_code = result_set.column_type(col)
        scale = result_set.scale(col)
        if declared_type is not None:
            logical_type = declared_type
        else:
            logical_type = resolve_type(type_code, scale)
        return cls(
            name=result_set.column_name(col),
            position=position,
            type_code=type_code,
            scale=scale,
            logical_type=logical_type,
            declared=declared_type is not None,
            )

    def __repr__(self) -> str:
        type_name = self.type_code.name if isinstance(self.type_code, SqlType) else self.type_code
        return (f'Column(name={self.name!r}, type_code={type_name}, '
                f'logical_type={self.logical_type.name if self.logical_type else None})')


def columns_from_result_set(result_set: Any,
                            declared_types: list[LogicalType] | None = None) -> list[Column]:
    """Create Column objects for every column of the current row.

    Args:
        result_set: Result set with column metadata
        declared_types: Optional per-column declared logical types

    Returns
        List of Column objects
    """
    result = []
    for position in range(result_set.column_count):
        declared = declared_types[position] if declared_types else None
        result.append(Column.from_result_set(result_set, position, declared))
    return result
