# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Account server.

Serves synchronized account tokens to a running NATS cluster. It keeps an
index from account public key to token for resolver lookups, pushes new
tokens on the claims update subject and, when an account is deleted, pushes a
revocation signed by the account's signer on the claims delete subject before
letting the account go.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Optional

from natz.api.account import NatsAccount
from natz.config import ReconcilerConfig
from natz.controllers.base import Controller, Result
from natz.events import (
    EVENT_ACCOUNT_ACCESS_DELETED,
    EVENT_ACCOUNT_ACCESS_FAILED,
    EVENT_ACCOUNT_ACCESS_GRANTED,
    EventBus,
)
from natz.exceptions import NatzError, NotFoundError, PublishError, StaleWriteError
from natz.jwt import ClaimKind, authorize_signer, encode, revocation_claims
from natz.keys.keystore import KeyStore
from natz.observability import MetricsCollector
from natz.storage.provider import AbstractObjectStore
from natz.transport.base import Publisher

logger = logging.getLogger(__name__)


class AccountServer(Controller):
    """Propagates account tokens and answers public-key lookups.

    The index is shared between reconciliation passes and lookup callers, so
    it is guarded by a lock held only for the dictionary operations.
    """

    def __init__(
        self,
        store: AbstractObjectStore,
        publisher: Publisher,
        keys: Optional[KeyStore] = None,
        events: Optional[EventBus] = None,
        config: Optional[ReconcilerConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(store, keys=keys, events=events, config=config, metrics=metrics)
        self.publisher = publisher
        self._lock = threading.Lock()
        self._tokens: dict[str, str] = {}
        self._published: dict[str, str] = {}
        self._publish_failures: dict[str, int] = {}

    # Lookup

    def get_token(self, public_key: str) -> tuple[str, bool]:
        """Return ``(token, True)`` for an indexed account, ``("", False)`` otherwise."""
        with self._lock:
            token = self._tokens.get(public_key)
        if token is None:
            return "", False
        return token, True

    def lookup(self, public_key: str) -> str:
        """Return the token of an indexed account.

        Raises:
            NotFoundError: If no account with ``public_key`` is indexed.
        """
        token, found = self.get_token(public_key)
        if not found:
            raise NotFoundError(f"no account token for {public_key}")
        return token

    def public_keys(self) -> list[str]:
        with self._lock:
            return sorted(self._tokens)

    # Reconciliation

    async def reconcile(self, namespace: str, name: str) -> Result:
        """Index and publish the token of a synchronized account."""
        try:
            return await self._reconcile(namespace, name)
        except StaleWriteError as err:
            return self.conflict(NatsAccount.kind, namespace, name, err)

    async def _reconcile(self, namespace: str, name: str) -> Result:
        account = await self.store.get(NatsAccount, namespace, name)
        if account is None:
            return Result()

        if account.metadata.deleting:
            return await self.reconcile_delete(account)

        if not account.is_synchronized:
            logger.debug("Account %s/%s not synchronized yet", namespace, name)
            return Result(requeue=True)

        public_key, token = account.status.public_key, account.status.token
        with self._lock:
            self._tokens[public_key] = token
            published = self._published.get(public_key) == token
            indexed = len(self._tokens)
        self.metrics.set_account_index_size(indexed)

        if not published:
            try:
                await self.publisher.publish_update(token)
            except PublishError as err:
                self.metrics.record_publish(self.publisher.config.update_subject, False)
                return self._publish_failed(account, err)
            with self._lock:
                self._published[public_key] = token
                self._publish_failures.pop(public_key, None)
            self.metrics.record_publish(self.publisher.config.update_subject, True)
            logger.info("Published account %s/%s (%s)", namespace, name, public_key)
            self.emit(account, EVENT_ACCOUNT_ACCESS_GRANTED, public_key=public_key)

        if account.metadata.add_finalizer():
            await self.store.update(account)
        return Result()

    def _publish_failed(self, account: NatsAccount, err: PublishError) -> Result:
        public_key = account.status.public_key
        with self._lock:
            failures = self._publish_failures.get(public_key, 0) + 1
            self._publish_failures[public_key] = failures
        delay = self.config.backoff.delay(failures)
        logger.error(
            "Publishing account %s/%s failed, retrying in %.1fs: %s",
            account.namespace,
            account.name,
            delay,
            err,
        )
        self.emit(
            account, EVENT_ACCOUNT_ACCESS_FAILED, warning=True, public_key=public_key, error=str(err)
        )
        return Result(requeue=True, requeue_after=delay)

    async def reconcile_delete(self, account: NatsAccount) -> Result:
        """Revoke a deleted account on the cluster, then release its finalizer.

        The finalizer gates the revocation: once it is gone, later passes do
        nothing, so each deletion publishes one revocation.
        """
        if not account.metadata.has_finalizer():
            return Result()

        public_key = account.status.public_key
        if public_key:
            try:
                signer = await self.keys.load(account.spec.signer_key_ref, account.namespace)
                authorize_signer(ClaimKind.GENERIC, signer)
                claims = revocation_claims(signer.public_key, [public_key], issued_at=int(time.time()))
                await self.publisher.publish_delete(encode(claims, signer))
            except NatzError as err:
                if isinstance(err, PublishError):
                    self.metrics.record_publish(self.publisher.config.delete_subject, False)
                logger.error(
                    "Revoking account %s/%s failed: %s", account.namespace, account.name, err
                )
                self.emit(
                    account,
                    EVENT_ACCOUNT_ACCESS_FAILED,
                    warning=True,
                    public_key=public_key,
                    error=str(err),
                )
                return await self.retry_later(account, err)

            with self._lock:
                self._tokens.pop(public_key, None)
                self._published.pop(public_key, None)
                self._publish_failures.pop(public_key, None)
                indexed = len(self._tokens)
            self.metrics.record_publish(self.publisher.config.delete_subject, True)
            self.metrics.set_account_index_size(indexed)
            logger.info("Revoked account %s/%s (%s)", account.namespace, account.name, public_key)
            self.emit(account, EVENT_ACCOUNT_ACCESS_DELETED, public_key=public_key)

        account.metadata.remove_finalizer()
        await self.store.update(account)
        return Result()


__all__ = ["AccountServer"]
