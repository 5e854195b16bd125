# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Reconciler for NatsActivation: grants one account an import of another's private export."""

from natz.api.account import NatsAccount
from natz.api.activation import NatsActivation
from natz.api.common import AccountReference
from natz.controllers.base import Reconciler
from natz.exceptions import MissingReferenceError
from natz.jwt import ClaimKind, activation_claims, authorize_signer, encode


class ActivationReconciler(Reconciler[NatsActivation]):
    """Signs activation tokens with the exporting account's key.

    The token's subject is the importing account and its ``issuer_account``
    the exporting one. Activations have no keypair of their own, so their
    status never carries a public key.
    """

    resource_type = NatsActivation

    async def sync(self, obj: NatsActivation) -> tuple[str, str]:
        exporter = await self._account_public_key(obj, obj.spec.account_ref)
        importer = await self._account_public_key(obj, obj.spec.target_account_ref)

        signer = await self.keys.load(obj.spec.signer_key_ref, obj.namespace)
        authorize_signer(ClaimKind.ACTIVATION, signer)

        claims = activation_claims(
            importer,
            obj.spec,
            issuer_account=exporter,
            issued_at=self.issued_at(obj),
        )
        return "", encode(claims, signer)

    async def _account_public_key(self, obj: NatsActivation, ref: AccountReference) -> str:
        namespace = ref.resolve_namespace(obj.namespace)
        account = await self.store.get(NatsAccount, namespace, ref.name)
        if account is None:
            raise MissingReferenceError(f"NatsAccount {namespace}/{ref.name} not found")
        if not account.status.public_key:
            raise MissingReferenceError(f"NatsAccount {namespace}/{ref.name} has no public key yet")
        return account.status.public_key
