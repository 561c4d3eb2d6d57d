import pickle
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from libb import ConfigOptions

__all__ = [
    'ReaderOptions',
    'pickle_object_loader',
]


def pickle_object_loader(stream) -> Any:
    """Default loader for serialized-object columns."""
    return pickle.load(stream)


@dataclass
class ReaderOptions(ConfigOptions):
    """Options

    Row materialization options:
    - blob_buffer_size: Initial capacity and chunk size for binary copies (default: 2048)
    - tolerate_zero_datetime: Read all-zero datetimes as None instead of failing (default: True)
    - log_recovered_reads: Log a warning for each recovered datetime read (default: False)
    - object_loader: Deserializer for serialized-object columns (default: pickle)
    """
    blob_buffer_size: int = 2048
    tolerate_zero_datetime: bool = True
    log_recovered_reads: bool = False
    object_loader: Callable[..., Any] | None = None

    def __post_init__(self):
        if self.blob_buffer_size <= 0:
            raise ValueError('blob_buffer_size must be a positive integer')
        if self.object_loader is None:
            self.object_loader = pickle_object_loader
