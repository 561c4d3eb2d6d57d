"""Low-level driver utilities with no internal dependencies.

These utilities work with raw DB-API cursors and connections and have no
imports from other reader modules, making them safe to import without
circular dependency concerns.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)


def get_dialect_name(obj: Any) -> str:
    """Get dialect name for a DB-API cursor or connection.
    """
    if hasattr(obj, 'dialect') and isinstance(obj.dialect, str):
        return obj.dialect.lower()

    type_name = f'{type(obj).__module__}.{type(obj).__name__}'
    if 'psycopg' in type_name:
        return 'postgresql'
    if 'sqlite3' in type_name:
        return 'sqlite'

    if hasattr(obj, 'connection') and obj.connection is not obj:
        return get_dialect_name(obj.connection)

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def close_quietly(resource: Any, label: str) -> bool:
    """Close a resource, logging instead of raising on failure.

    Returns True when the close call succeeded.
    """
    if resource is None:
        return True
    try:
        resource.close()
        return True
    except Exception as e:
        logger.error(f'Could not close {label}: {e}', exc_info=True)
        return False
