# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Reconciler for NatsUser: signs user tokens and writes their credentials secret."""

import logging

from natz.api.account import NatsAccount
from natz.api.common import ObjectMeta
from natz.api.secret import Secret
from natz.api.user import NatsUser
from natz.constants import (
    OWNER_ANNOTATION,
    SECRET_TYPE_USER_CREDENTIALS,
    SECRET_USER_CREDS_KEY,
    SECRET_USER_JWT_KEY,
)
from natz.controllers.base import Reconciler
from natz.events import EVENT_USER_SECRET_CREATED
from natz.exceptions import AuthorizationViolationError, InvalidSeedError, MissingReferenceError
from natz.jwt import ClaimKind, authorize_signer, encode, format_user_credentials, user_claims
from natz.keys.nkeys import KeyClass

logger = logging.getLogger(__name__)


class UserReconciler(Reconciler[NatsUser]):
    """Issues user tokens signed by the account key or one of its signing keys.

    The token names the owning account in ``issuer_account``, so the account
    must be synchronized first. A user outside the account's namespace must
    live in one of the account's ``allowed_user_namespaces``.
    """

    resource_type = NatsUser

    async def sync(self, obj: NatsUser) -> tuple[str, str]:
        account = await self._load_account(obj)

        signer = await self.keys.load(obj.spec.signer_key_ref, obj.namespace)
        authorize_signer(ClaimKind.USER, signer)

        keypair = await self.keys.load(obj.spec.private_key, obj.namespace)
        if keypair.key_class != KeyClass.USER:
            raise InvalidSeedError(
                f"user key of {obj.namespace}/{obj.name} is a {keypair.key_class.value} key"
            )

        claims = user_claims(
            keypair.public_key,
            obj.spec,
            issuer_account=account.status.public_key,
            name=obj.name,
            issued_at=self.issued_at(obj),
        )
        token = encode(claims, signer)

        await self._write_credentials(obj, token, keypair.seed)
        return keypair.public_key, token

    async def _load_account(self, obj: NatsUser) -> NatsAccount:
        ref = obj.spec.account_ref
        namespace = ref.resolve_namespace(obj.namespace)
        account = await self.store.get(NatsAccount, namespace, ref.name)
        if account is None:
            raise MissingReferenceError(f"NatsAccount {namespace}/{ref.name} not found")

        allowed = account.spec.allowed_user_namespaces
        if obj.namespace != account.namespace and obj.namespace not in allowed:
            raise AuthorizationViolationError(
                f"users in namespace {obj.namespace} may not join account {namespace}/{ref.name}"
            )

        if not account.status.public_key:
            raise MissingReferenceError(f"NatsAccount {namespace}/{ref.name} has no public key yet")
        return account

    async def _write_credentials(self, obj: NatsUser, token: str, seed: bytes) -> None:
        name = obj.credentials_secret_name
        data = {
            SECRET_USER_JWT_KEY: token.encode("ascii"),
            SECRET_USER_CREDS_KEY: format_user_credentials(token, seed),
        }

        existing = await self.store.get_secret(obj.namespace, name)
        if existing is not None and existing.data == data:
            return

        await self.store.put_secret(
            Secret(
                metadata=ObjectMeta(
                    name=name,
                    namespace=obj.namespace,
                    annotations={OWNER_ANNOTATION: f"{obj.kind}/{obj.name}"},
                ),
                type=SECRET_TYPE_USER_CREDENTIALS,
                data=data,
            )
        )
        logger.info("Wrote credentials secret %s/%s", obj.namespace, name)
        if existing is None:
            self.emit(obj, EVENT_USER_SECRET_CREATED, secret=name)

    async def finalize(self, obj: NatsUser) -> None:
        await self.store.delete_secret(obj.namespace, obj.credentials_secret_name)
