# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Reconciler for NatsKey: keeps a seed secret for every declared key."""

import logging

from natz.api.key import NatsKey
from natz.controllers.base import Reconciler

logger = logging.getLogger(__name__)


class KeyReconciler(Reconciler[NatsKey]):
    """Generates the seed secret of a NatsKey once and records its public key.

    On deletion the secret is removed unless ``prevent_deletion`` is set.
    """

    resource_type = NatsKey

    async def sync(self, obj: NatsKey) -> tuple[str, str]:
        public_key = await self.keys.generate_keypair(obj.namespace, obj.name, obj.spec.type)
        return public_key, ""

    async def finalize(self, obj: NatsKey) -> None:
        if obj.spec.prevent_deletion:
            logger.info("Keeping secret of %s/%s, deletion is prevented", obj.namespace, obj.name)
            return
        await self.keys.delete_key(obj.namespace, obj.name)
