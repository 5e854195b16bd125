"""
Abstract Object Store Interface.

Defines the contract the reconcilers expect from the declarative store that
holds resources (spec + status) and the secrets that hold key material.
"""

from abc import ABC, abstractmethod
from typing import Optional, TypeVar

from pydantic import BaseModel, Field

from natz.api.common import Resource
from natz.api.secret import Secret

T = TypeVar("T", bound=Resource)


class StorageConfig(BaseModel):
    """Configuration for the object store."""

    backend: str = Field(default="memory", description="Storage backend type")
    connection_string: Optional[str] = Field(default=None, description="Connection string")
    timeout_seconds: int = Field(default=30, ge=1, le=300, description="Operation timeout")
    default_namespace: str = Field(default="default", description="Namespace for unqualified names")


class AbstractObjectStore(ABC):
    """
    Abstract object store.

    Every backend must provide:
    - Typed get/list of resources by kind, namespace and name
    - Optimistic concurrency: ``update`` and ``update_status`` fail with
      StaleWriteError when the caller's ``resource_version`` is outdated
    - Finalizer semantics: deleting an object that carries finalizers only
      marks it with a ``deletion_timestamp``; removing the last finalizer of
      such an object removes it
    - Secret records keyed by namespace and name
    """

    def __init__(self, config: Optional[StorageConfig] = None):
        """Initialize the store with configuration."""
        self.config = config or StorageConfig()

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the store."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the store."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is healthy."""
        pass

    # Resource Operations

    @abstractmethod
    async def get(self, cls: type[T], namespace: str, name: str) -> Optional[T]:
        """Get a copy of a resource, or None if absent."""
        pass

    @abstractmethod
    async def list(self, cls: type[T], namespace: Optional[str] = None) -> list[T]:
        """List resources of a kind, optionally within one namespace."""
        pass

    @abstractmethod
    async def create(self, obj: T) -> T:
        """Create a resource. Raises StorageError if it already exists."""
        pass

    @abstractmethod
    async def update(self, obj: T) -> T:
        """Write metadata and spec; the stored status is kept."""
        pass

    @abstractmethod
    async def update_status(self, obj: T) -> T:
        """Write only the status block."""
        pass

    @abstractmethod
    async def delete(self, cls: type[T], namespace: str, name: str) -> bool:
        """Request deletion. Returns False if the resource does not exist."""
        pass

    # Secret Operations

    @abstractmethod
    async def get_secret(self, namespace: str, name: str) -> Optional[Secret]:
        """Get a secret, or None if absent."""
        pass

    @abstractmethod
    async def put_secret(self, secret: Secret) -> Secret:
        """Create or replace a secret."""
        pass

    @abstractmethod
    async def delete_secret(self, namespace: str, name: str) -> bool:
        """Delete a secret."""
        pass
