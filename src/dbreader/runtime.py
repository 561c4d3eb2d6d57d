"""
Caller-side value types and the runtime binding used to build them.

Values read from the database as text are wrapped in TaintedStr so callers can
tell them apart from trusted strings. Binary columns become ByteArray values.
The Runtime class is the narrow surface the value converter uses to build
caller-native values: byte arrays, classes resolved by name and deserialized
objects.
"""
import builtins
import logging
import sys
from typing import Any

from dbreader.options import ReaderOptions

logger = logging.getLogger(__name__)

__all__ = [
    'TaintedStr',
    'ByteArray',
    'Runtime',
    'is_tainted',
]


class TaintedStr(str):
    """String that originated from untrusted external input.

    Slicing or formatting yields plain str; the flag only covers the value
    read from the database.
    """

    tainted = True

    def __repr__(self) -> str:
        return f'TaintedStr({str.__repr__(self)})'


class ByteArray(bytes):
    """Binary column value.
    """

    def __repr__(self) -> str:
        return f'ByteArray({len(self)} bytes)'


def is_tainted(value: Any) -> bool:
    """Check whether a value is flagged as untrusted input.
    """
    return bool(getattr(value, 'tainted', False))


class Runtime:
    """Builds caller-native values for the value converter.
    """

    def __init__(self, options: ReaderOptions | None = None) -> None:
        self.options = options or ReaderOptions()

    def taint(self, text: str) -> str:
        """Mark text as untrusted.
        """
        return TaintedStr(text)

    def new_byte_array(self, data: bytes | bytearray) -> ByteArray:
        """Wrap copied column bytes in the caller's blob type.
        """
        return ByteArray(data)

    def resolve_class(self, name: str) -> type:
        """Resolve a dotted class name such as 'decimal.Decimal'.

        Only modules already loaded in sys.modules are searched; a name read
        from the database never triggers an import. Names without a module
        part are looked up in builtins.
        """
        parts = str(name).split('.')
        obj: Any = builtins
        attrs = parts
        for i in range(len(parts) - 1, 0, -1):
            module = sys.modules.get('.'.join(parts[:i]))
            if module is not None:
                obj, attrs = module, parts[i:]
                break

        for attr in attrs:
            try:
                obj = getattr(obj, attr)
            except AttributeError:
                raise NameError(f'uninitialized constant {name}') from None

        if not isinstance(obj, type):
            raise TypeError(f'{name} does not name a class')
        logger.debug(f'Resolved class name {name!r} to {obj!r}')
        return obj

    def load_object(self, stream) -> Any:
        """Deserialize a caller-native object from a byte stream.
        """
        return self.options.object_loader(stream)
