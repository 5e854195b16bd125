"""
In-Memory Object Store.

Simple in-memory implementation for development and testing.
"""

import logging
from typing import Optional

from natz.api.common import Resource, utcnow
from natz.api.secret import Secret
from natz.exceptions import StaleWriteError, StorageError

from .provider import AbstractObjectStore, StorageConfig, T

logger = logging.getLogger(__name__)

_ObjectKey = tuple[str, str, str]


class MemoryObjectStore(AbstractObjectStore):
    """
    In-memory object store.

    Uses Python dictionaries for storage. Data is lost on restart.
    Every read returns a deep copy, so callers can mutate what they get and
    write it back like they would against a remote store.
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize in-memory storage."""
        super().__init__(config)
        self._objects: dict[_ObjectKey, Resource] = {}
        self._connected = False

    async def connect(self) -> None:
        """Establish connection (no-op for memory)."""
        self._connected = True

    async def disconnect(self) -> None:
        """Close connection (no-op for memory)."""
        self._connected = False

    async def health_check(self) -> bool:
        """Check if storage is healthy."""
        return self._connected

    # Resource Operations

    async def get(self, cls: type[T], namespace: str, name: str) -> Optional[T]:
        """Get a copy of a resource, or None if absent."""
        obj = self._objects.get((cls.kind, namespace, name))
        if obj is None:
            return None
        return obj.model_copy(deep=True)

    async def list(self, cls: type[T], namespace: Optional[str] = None) -> list[T]:
        """List resources of a kind, optionally within one namespace."""
        return [
            obj.model_copy(deep=True)
            for (kind, ns, _), obj in sorted(self._objects.items())
            if kind == cls.kind and (namespace is None or ns == namespace)
        ]

    async def create(self, obj: T) -> T:
        """Create a resource."""
        key = obj.key
        if key in self._objects:
            raise StorageError(f"{obj.kind} {obj.namespace}/{obj.name} already exists")
        stored = obj.model_copy(deep=True)
        stored.metadata.resource_version = 1
        stored.metadata.deletion_timestamp = None
        self._objects[key] = stored
        logger.debug("Created %s %s/%s", obj.kind, obj.namespace, obj.name)
        return stored.model_copy(deep=True)

    async def update(self, obj: T) -> T:
        """Write metadata and spec; the stored status is kept.

        ``generation`` is bumped when ``spec`` changes. Removing the last
        finalizer of an object pending deletion removes the object.
        """
        current = self._check_version(obj)
        stored = obj.model_copy(deep=True)
        stored.metadata.deletion_timestamp = current.metadata.deletion_timestamp
        stored.metadata.creation_timestamp = current.metadata.creation_timestamp
        stored.metadata.generation = current.metadata.generation
        if self._spec_of(stored) != self._spec_of(current):
            stored.metadata.generation += 1
        if hasattr(current, "status"):
            stored.status = current.status.model_copy(deep=True)
        return self._commit(stored)

    async def update_status(self, obj: T) -> T:
        """Write only the status block."""
        current = self._check_version(obj)
        if not hasattr(obj, "status"):
            raise StorageError(f"{obj.kind} has no status")
        stored = current.model_copy(deep=True)
        stored.status = obj.status.model_copy(deep=True)
        return self._commit(stored)

    async def delete(self, cls: type[T], namespace: str, name: str) -> bool:
        """Request deletion; objects with finalizers are only marked."""
        key = (cls.kind, namespace, name)
        current = self._objects.get(key)
        if current is None:
            return False
        if current.metadata.finalizers:
            if current.metadata.deletion_timestamp is None:
                current.metadata.deletion_timestamp = utcnow()
                current.metadata.resource_version += 1
                logger.debug("Marked %s %s/%s for deletion", cls.kind, namespace, name)
            return True
        del self._objects[key]
        logger.debug("Deleted %s %s/%s", cls.kind, namespace, name)
        return True

    # Secret Operations

    async def get_secret(self, namespace: str, name: str) -> Optional[Secret]:
        """Get a secret, or None if absent."""
        return await self.get(Secret, namespace, name)

    async def put_secret(self, secret: Secret) -> Secret:
        """Create or replace a secret."""
        stored = secret.model_copy(deep=True)
        current = self._objects.get(secret.key)
        if current is None:
            stored.metadata.resource_version = 1
        else:
            stored.metadata.resource_version = current.metadata.resource_version + 1
        self._objects[secret.key] = stored
        return stored.model_copy(deep=True)

    async def delete_secret(self, namespace: str, name: str) -> bool:
        """Delete a secret."""
        return self._objects.pop((Secret.kind, namespace, name), None) is not None

    # Helpers

    def _check_version(self, obj: Resource) -> Resource:
        current = self._objects.get(obj.key)
        if current is None:
            raise StaleWriteError(f"{obj.kind} {obj.namespace}/{obj.name} no longer exists")
        if current.metadata.resource_version != obj.metadata.resource_version:
            raise StaleWriteError(
                f"{obj.kind} {obj.namespace}/{obj.name} was modified "
                f"(have {obj.metadata.resource_version}, "
                f"stored {current.metadata.resource_version})"
            )
        return current

    def _commit(self, stored: Resource) -> Resource:
        stored.metadata.resource_version += 1
        if stored.metadata.deleting and not stored.metadata.finalizers:
            self._objects.pop(stored.key, None)
            logger.debug("Removed %s %s/%s", stored.kind, stored.namespace, stored.name)
        else:
            self._objects[stored.key] = stored
        return stored.model_copy(deep=True)

    @staticmethod
    def _spec_of(obj: Resource) -> object:
        spec = getattr(obj, "spec", None)
        return spec.model_dump() if spec is not None else None
