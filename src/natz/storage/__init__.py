"""
Object store backends.

The reconcilers talk to the declarative store through AbstractObjectStore;
MemoryObjectStore backs development and tests.
"""

from .memory_provider import MemoryObjectStore
from .provider import AbstractObjectStore, StorageConfig

__all__ = [
    "AbstractObjectStore",
    "MemoryObjectStore",
    "StorageConfig",
]
