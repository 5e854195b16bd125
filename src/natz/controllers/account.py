# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Reconciler for NatsAccount."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from natz.api.account import NatsAccount
from natz.config import ReconcilerConfig
from natz.controllers.base import Reconciler, Result
from natz.events import EventBus
from natz.exceptions import InvalidSeedError
from natz.jwt import ClaimKind, account_claims, authorize_signer, encode
from natz.keys.keystore import KeyStore
from natz.keys.nkeys import KeyClass
from natz.observability import MetricsCollector
from natz.storage.provider import AbstractObjectStore

if TYPE_CHECKING:
    from natz.controllers.account_server import AccountServer


class AccountReconciler(Reconciler[NatsAccount]):
    """Issues account tokens signed by an operator key.

    Deletion is handed to the account server, which publishes a revocation
    for the account before the finalizer is released.
    """

    resource_type = NatsAccount

    def __init__(
        self,
        store: AbstractObjectStore,
        account_server: AccountServer,
        keys: Optional[KeyStore] = None,
        events: Optional[EventBus] = None,
        config: Optional[ReconcilerConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ) -> None:
        super().__init__(store, keys=keys, events=events, config=config, metrics=metrics)
        self.account_server = account_server

    async def sync(self, obj: NatsAccount) -> tuple[str, str]:
        signer = await self.keys.load(obj.spec.signer_key_ref, obj.namespace)
        authorize_signer(ClaimKind.ACCOUNT, signer)

        keypair = await self.keys.load(obj.spec.private_key, obj.namespace)
        if keypair.key_class != KeyClass.ACCOUNT:
            raise InvalidSeedError(
                f"account key of {obj.namespace}/{obj.name} is a {keypair.key_class.value} key"
            )

        # Account signing keys sign users on the account's behalf.
        signing_keys = []
        for ref in obj.spec.signing_keys:
            signing_key = await self.keys.load(ref, obj.namespace)
            authorize_signer(ClaimKind.USER, signing_key)
            signing_keys.append(signing_key.public_key)

        claims = account_claims(
            keypair.public_key,
            obj.spec,
            name=obj.name,
            signing_keys=signing_keys,
            issued_at=self.issued_at(obj),
        )
        return keypair.public_key, encode(claims, signer)

    async def reconcile_delete(self, obj: NatsAccount) -> Result:
        return await self.account_server.reconcile_delete(obj)
