"""
Secret-backed Key Store

Abstract key store plus the default implementation that keeps each seed in a
secret named after its NatsKey. Seeds are generated once and never replaced,
so a public key derived from a stored secret stays stable for the lifetime of
the key. All key operations are logged for audit.
"""

from __future__ import annotations

import abc
import logging
from typing import Union

from natz.api.common import KeyReference, ObjectMeta
from natz.api.key import NatsKey
from natz.api.secret import Secret
from natz.constants import OWNER_ANNOTATION, SECRET_PUBLIC_KEY, SECRET_SEED_KEY, SECRET_TYPE_KEY
from natz.exceptions import InvalidSeedError, MissingReferenceError
from natz.keys.nkeys import KeyClass, KeyPair, from_seed, generate
from natz.storage.provider import AbstractObjectStore

logger = logging.getLogger(__name__)


class KeyStore(abc.ABC):
    """Abstract base class for key storage backends.

    Keys are addressed by the namespace and name of their NatsKey. Backends
    may keep seeds in secrets, on disk or in a hardware security module.
    """

    @abc.abstractmethod
    async def generate_keypair(
        self, namespace: str, name: str, key_class: Union[str, KeyClass]
    ) -> str:
        """Ensure a keypair exists for ``namespace/name``.

        Returns:
            The encoded public key, of the existing keypair if there is one.

        Raises:
            UnknownKeyClassError: If ``key_class`` is not an identity class.
            InvalidSeedError: If a stored seed exists but is unusable.
        """

    @abc.abstractmethod
    async def load(self, ref: KeyReference, namespace: str) -> KeyPair:
        """Resolve a key reference to a signing keypair.

        Args:
            ref: The reference; an empty namespace means ``namespace``.
            namespace: Namespace of the referencing resource.

        Raises:
            MissingReferenceError: If the NatsKey or its secret is absent.
            InvalidSeedError: If the secret holds no valid seed.
        """

    @abc.abstractmethod
    async def get_public_key(self, namespace: str, name: str) -> str:
        """Retrieve the encoded public key for ``namespace/name``."""

    @abc.abstractmethod
    async def delete_key(self, namespace: str, name: str) -> bool:
        """Delete the stored keypair. Returns False if none existed."""


class SecretKeyStore(KeyStore):
    """Key store backed by secrets in the object store.

    Each key lives in a secret of the same namespace and name as its NatsKey,
    holding the seed under ``seed.nk`` and the public key under ``key.pub``.
    """

    def __init__(self, store: AbstractObjectStore) -> None:
        self._store = store

    async def generate_keypair(
        self, namespace: str, name: str, key_class: Union[str, KeyClass]
    ) -> str:
        kc = KeyClass.parse(key_class)

        existing = await self._store.get_secret(namespace, name)
        if existing is not None and existing.get(SECRET_SEED_KEY):
            keypair = self._from_secret(existing)
            if keypair.key_class != kc:
                raise InvalidSeedError(
                    f"secret {namespace}/{name} holds a {keypair.key_class.value} seed, "
                    f"expected {kc.value}"
                )
            logger.debug("Reusing %s keypair %s/%s", kc.value, namespace, name)
            return keypair.public_key

        keypair = generate(kc)
        secret = Secret(
            metadata=ObjectMeta(
                name=name,
                namespace=namespace,
                annotations={OWNER_ANNOTATION: f"{NatsKey.kind}/{name}"},
            ),
            type=SECRET_TYPE_KEY,
            data={
                SECRET_SEED_KEY: keypair.seed,
                SECRET_PUBLIC_KEY: keypair.public_key.encode("ascii"),
            },
        )
        await self._store.put_secret(secret)
        logger.info("Stored %s keypair %s for %s/%s", kc.value, keypair.public_key, namespace, name)
        return keypair.public_key

    async def load(self, ref: KeyReference, namespace: str) -> KeyPair:
        ns = ref.resolve_namespace(namespace)

        key = await self._store.get(NatsKey, ns, ref.name)
        if key is None:
            raise MissingReferenceError(f"NatsKey {ns}/{ref.name} not found")

        secret = await self._store.get_secret(ns, ref.name)
        if secret is None:
            raise MissingReferenceError(f"secret {ns}/{ref.name} not found")

        keypair = self._from_secret(secret)
        if keypair.key_class != key.spec.type:
            raise InvalidSeedError(
                f"NatsKey {ns}/{ref.name} declares {key.spec.type.value} "
                f"but its seed is {keypair.key_class.value}"
            )
        logger.debug("Loaded %s key %s from %s/%s", keypair.key_class.value, keypair.public_key, ns, ref.name)
        return keypair

    async def get_public_key(self, namespace: str, name: str) -> str:
        secret = await self._store.get_secret(namespace, name)
        if secret is None:
            raise MissingReferenceError(f"secret {namespace}/{name} not found")
        return self._from_secret(secret).public_key

    async def delete_key(self, namespace: str, name: str) -> bool:
        deleted = await self._store.delete_secret(namespace, name)
        if deleted:
            logger.info("Deleted keypair secret %s/%s", namespace, name)
        return deleted

    @staticmethod
    def _from_secret(secret: Secret) -> KeyPair:
        seed = secret.get(SECRET_SEED_KEY)
        if not seed:
            raise InvalidSeedError(
                f"secret {secret.namespace}/{secret.name} has no {SECRET_SEED_KEY} entry"
            )
        return from_seed(seed)


__all__ = [
    "KeyStore",
    "SecretKeyStore",
]
