# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Reconciler for NatsOperator: the self-signed root of the chain."""

from natz.api.operator import NatsOperator
from natz.controllers.base import Reconciler
from natz.jwt import ClaimKind, authorize_signer, encode, operator_claims


class OperatorReconciler(Reconciler[NatsOperator]):
    resource_type = NatsOperator

    async def sync(self, obj: NatsOperator) -> tuple[str, str]:
        keypair = await self.keys.load(obj.spec.private_key, obj.namespace)
        authorize_signer(ClaimKind.OPERATOR, keypair)

        # Operator signing keys sign accounts on the operator's behalf.
        signing_keys = []
        for ref in obj.spec.signing_keys:
            signing_key = await self.keys.load(ref, obj.namespace)
            authorize_signer(ClaimKind.ACCOUNT, signing_key)
            signing_keys.append(signing_key.public_key)

        claims = operator_claims(
            keypair.public_key,
            name=obj.name,
            signing_keys=signing_keys,
            issued_at=self.issued_at(obj),
        )
        return keypair.public_key, encode(claims, keypair)
