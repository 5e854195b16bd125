# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Shared resource types.

Object metadata, references, conditions and the status block common to every
identity resource.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from natz.constants import FINALIZER_NAME


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Phase(str, Enum):
    """Lifecycle phase of a resource."""

    NONE = ""
    PENDING = "Pending"
    CREATING = "Creating"
    SYNCHRONIZED = "Synchronized"
    FAILED = "Failed"


class ConditionStatus(str, Enum):
    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class Condition(BaseModel):
    """An entry in a resource's condition history."""

    type: str
    status: ConditionStatus = ConditionStatus.TRUE
    reason: str = ""
    message: str = ""
    last_transition_time: datetime = Field(default_factory=utcnow)
    observed_generation: int = 0


class ObjectMeta(BaseModel):
    """Identity and bookkeeping of a stored object."""

    name: str
    namespace: str = "default"
    resource_version: int = 0
    generation: int = 1
    creation_timestamp: datetime = Field(default_factory=utcnow)
    deletion_timestamp: Optional[datetime] = None
    finalizers: list[str] = Field(default_factory=list)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @property
    def deleting(self) -> bool:
        return self.deletion_timestamp is not None

    def has_finalizer(self, finalizer: str = FINALIZER_NAME) -> bool:
        return finalizer in self.finalizers

    def add_finalizer(self, finalizer: str = FINALIZER_NAME) -> bool:
        """Add ``finalizer``; returns True if the list changed."""
        if finalizer in self.finalizers:
            return False
        self.finalizers.append(finalizer)
        return True

    def remove_finalizer(self, finalizer: str = FINALIZER_NAME) -> bool:
        """Remove ``finalizer``; returns True if the list changed."""
        if finalizer not in self.finalizers:
            return False
        self.finalizers = [f for f in self.finalizers if f != finalizer]
        return True


class KeyReference(BaseModel):
    """Reference to a NatsKey (and the secret of the same name)."""

    name: str
    namespace: str = ""

    def resolve_namespace(self, default: str) -> str:
        return self.namespace or default


class AccountReference(BaseModel):
    """Reference to a NatsAccount."""

    name: str
    namespace: str = ""

    def resolve_namespace(self, default: str) -> str:
        return self.namespace or default


class IdentityStatus(BaseModel):
    """Observed state written by the reconcilers.

    ``token`` is cleared when ``phase`` is Failed and, for every kind but
    NatsKey, set while ``phase`` is Synchronized. A NatsKey carries only
    its ``public_key``. Once set, ``public_key`` never changes; a pass
    whose key resolves to another one fails instead.
    """

    phase: Phase = Phase.NONE
    public_key: str = ""
    token: str = ""
    conditions: list[Condition] = Field(default_factory=list)
    control_paused: bool = False
    last_update: Optional[datetime] = None
    failures: int = Field(default=0, ge=0)

    def get_condition(self, condition_type: str) -> Optional[Condition]:
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None


class Resource(BaseModel):
    """Base for every stored resource; subclasses set ``kind``."""

    kind: ClassVar[str] = ""

    metadata: ObjectMeta

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.kind, self.metadata.namespace, self.metadata.name)


class IdentityResource(Resource):
    """A resource whose status follows the identity lifecycle."""

    status: IdentityStatus = Field(default_factory=IdentityStatus)

    @property
    def is_synchronized(self) -> bool:
        return self.status.phase == Phase.SYNCHRONIZED

    @property
    def is_failed(self) -> bool:
        return self.status.phase == Phase.FAILED

    @property
    def is_paused(self) -> bool:
        return self.status.control_paused

    @property
    def is_creating(self) -> bool:
        return not self.status.conditions


__all__ = [
    "Phase",
    "ConditionStatus",
    "Condition",
    "ObjectMeta",
    "KeyReference",
    "AccountReference",
    "IdentityStatus",
    "Resource",
    "IdentityResource",
    "utcnow",
]
