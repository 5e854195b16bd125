# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Reconciliation pass.

Every identity reconciler runs the same state machine. A pass loads the
resource and then does one of these:

* missing: nothing to do
* pending deletion: run ``reconcile_delete``
* ``spec.paused``: record ``control_paused`` once, then stop
* first observation: move to ``Creating`` and requeue immediately
* otherwise: ``sync`` resolves references, builds and signs the claim,
  and the outcome is written as a single status update

Failures are recorded as a ``Failed`` condition and answered with a bounded
exponential backoff. A resource whose keys resolve to a public key other
than the recorded one fails the same way. A stale write is answered with
a short requeue so the next pass re-reads. The pass never sleeps; it
returns the delay.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Optional, TypeVar

from natz.api.common import IdentityResource, Phase, utcnow
from natz.config import ReconcilerConfig
from natz.events import (
    ACTION_DELETED,
    ACTION_FAILED,
    ACTION_PAUSED,
    ACTION_SYNCHRONIZED,
    Event,
    EventBus,
    InMemoryEventBus,
    event_type,
)
from natz.exceptions import InvalidSeedError, NatzError, StaleWriteError
from natz.keys.keystore import KeyStore, SecretKeyStore
from natz.observability import MetricsCollector
from natz.status import new_failed_condition, new_synchronized_condition, set_condition
from natz.storage.provider import AbstractObjectStore

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=IdentityResource)


@dataclass(frozen=True)
class Result:
    """Outcome of a pass, telling the dispatcher whether and when to run it again."""

    requeue: bool = False
    requeue_after: float = 0.0


def check_public_key(obj: IdentityResource, public_key: str) -> None:
    """Reject a key that differs from the one already recorded in status.

    Raises:
        InvalidSeedError: If ``spec`` now resolves to another keypair.
    """
    recorded = obj.status.public_key
    if recorded and public_key and recorded != public_key:
        raise InvalidSeedError(
            f"{obj.kind} {obj.namespace}/{obj.name} is bound to public key {recorded}, "
            f"refusing to switch to {public_key}"
        )


class Controller:
    """Shared plumbing for reconcilers and the account server."""

    def __init__(
        self,
        store: AbstractObjectStore,
        keys: Optional[KeyStore] = None,
        events: Optional[EventBus] = None,
        config: Optional[ReconcilerConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        self.store = store
        self.keys = keys or SecretKeyStore(store)
        self.events = events or InMemoryEventBus()
        self.config = config or ReconcilerConfig()
        self.metrics = metrics or MetricsCollector()

    def emit(
        self, obj: IdentityResource, event_name: str, warning: bool = False, **payload: Any
    ) -> None:
        self.events.emit(
            Event(
                event_type=event_name,
                source=f"{obj.kind}/{obj.namespace}/{obj.name}",
                payload=payload,
                warning=warning,
            )
        )

    def conflict(self, obj_kind: str, namespace: str, name: str, err: StaleWriteError) -> Result:
        logger.info("Conflict writing %s %s/%s, retrying: %s", obj_kind, namespace, name, err)
        self.metrics.record_reconcile(obj_kind, "conflict")
        return Result(requeue=True, requeue_after=self.config.conflict_retry_seconds)

    async def retry_later(self, obj: IdentityResource, err: Exception) -> Result:
        """Count a failed pass on ``obj`` and requeue it with backoff."""
        obj.status.failures += 1
        obj.status.last_update = utcnow()
        await self.store.update_status(obj)
        delay = self.config.backoff.delay(obj.status.failures)
        logger.info(
            "Retrying %s %s/%s in %.1fs after %d failure(s): %s",
            obj.kind,
            obj.namespace,
            obj.name,
            delay,
            obj.status.failures,
            err,
        )
        return Result(requeue=True, requeue_after=delay)


class Reconciler(Controller, ABC, Generic[R]):
    """Base class of the per-kind identity reconcilers."""

    resource_type: ClassVar[type[IdentityResource]]

    async def reconcile(self, namespace: str, name: str) -> Result:
        """Run one pass for ``namespace/name``."""
        try:
            return await self._reconcile(namespace, name)
        except StaleWriteError as err:
            return self.conflict(self.resource_type.kind, namespace, name, err)

    async def _reconcile(self, namespace: str, name: str) -> Result:
        obj = await self.store.get(self.resource_type, namespace, name)
        if obj is None:
            logger.debug("%s %s/%s not found, nothing to do", self.resource_type.kind, namespace, name)
            return Result()

        if obj.metadata.deleting:
            try:
                return await self.reconcile_delete(obj)
            except StaleWriteError:
                raise
            except NatzError as err:
                logger.error("Deleting %s %s/%s failed: %s", obj.kind, namespace, name, err)
                return await self.retry_later(obj, err)

        if obj.spec.paused:
            return await self.pause(obj)

        resumed = obj.status.control_paused
        if resumed:
            logger.info("Resuming %s %s/%s", obj.kind, namespace, name)

        if obj.status.phase in (Phase.NONE, Phase.PENDING) and obj.is_creating:
            obj.status.phase = Phase.CREATING
            obj.status.control_paused = False
            await self.store.update_status(obj)
            logger.info("Creating %s %s/%s", obj.kind, namespace, name)
            return Result(requeue=True)

        try:
            public_key, token = await self.sync(obj)
            check_public_key(obj, public_key)
        except StaleWriteError:
            raise
        except NatzError as err:
            return await self.manage_error(obj, err)
        return await self.manage_success(obj, public_key, token)

    @abstractmethod
    async def sync(self, obj: R) -> tuple[str, str]:
        """Resolve references, build and sign the claim.

        Returns:
            The resource's public key and its token.
        """

    async def pause(self, obj: R) -> Result:
        if obj.status.control_paused:
            return Result()
        obj.status.control_paused = True
        await self.store.update_status(obj)
        logger.info("Paused %s %s/%s", obj.kind, obj.namespace, obj.name)
        self.metrics.record_reconcile(obj.kind, "paused")
        self.emit(obj, event_type(obj.kind, ACTION_PAUSED))
        return Result()

    async def manage_success(self, obj: R, public_key: str, token: str) -> Result:
        """Record a successful pass; writes nothing if the status would not change."""
        if obj.metadata.add_finalizer():
            obj = await self.store.update(obj)

        status = obj.status
        before = status.model_dump(exclude={"last_update"})

        status.control_paused = False
        if not status.public_key:
            status.public_key = public_key
        status.token = token
        status.phase = Phase.SYNCHRONIZED
        status.failures = 0
        set_condition(status, new_synchronized_condition(obj))

        if status.model_dump(exclude={"last_update"}) == before:
            logger.debug("%s %s/%s already synchronized", obj.kind, obj.namespace, obj.name)
            return Result()

        status.last_update = utcnow()
        await self.store.update_status(obj)
        logger.info("Synchronized %s %s/%s", obj.kind, obj.namespace, obj.name)
        self.metrics.record_reconcile(obj.kind, "synchronized")
        if status.token:
            self.metrics.record_token_issued(obj.kind)
        self.emit(obj, event_type(obj.kind, ACTION_SYNCHRONIZED), public_key=status.public_key)
        return Result()

    async def manage_error(self, obj: R, err: NatzError) -> Result:
        """Record a failed pass and requeue with backoff."""
        logger.error("Reconciling %s %s/%s failed: %s", obj.kind, obj.namespace, obj.name, err)

        status = obj.status
        status.control_paused = False
        set_condition(status, new_failed_condition(obj, err))
        status.token = ""
        status.phase = Phase.FAILED
        status.failures += 1
        status.last_update = utcnow()
        await self.store.update_status(obj)
        self.metrics.record_reconcile(obj.kind, "failed")

        self.emit(
            obj,
            event_type(obj.kind, ACTION_FAILED),
            warning=True,
            error=str(err),
            failures=status.failures,
        )
        return Result(requeue=True, requeue_after=self.config.backoff.delay(status.failures))

    async def reconcile_delete(self, obj: R) -> Result:
        """Run ``finalize`` and release the finalizer."""
        if not obj.metadata.has_finalizer():
            return Result()
        await self.finalize(obj)
        obj.metadata.remove_finalizer()
        await self.store.update(obj)
        logger.info("Finalized %s %s/%s", obj.kind, obj.namespace, obj.name)
        self.metrics.record_reconcile(obj.kind, "deleted")
        self.emit(obj, event_type(obj.kind, ACTION_DELETED))
        return Result()

    async def finalize(self, obj: R) -> None:
        """Clean up before the finalizer is released. No-op by default."""

    @staticmethod
    def issued_at(obj: IdentityResource) -> int:
        """Claim issue time: the resource's creation time, in Unix seconds."""
        return int(obj.metadata.creation_timestamp.timestamp())


__all__ = [
    "Controller",
    "Reconciler",
    "Result",
]
