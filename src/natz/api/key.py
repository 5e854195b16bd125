# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""NatsKey: a declared keypair whose seed lives in a secret of the same name."""

from typing import ClassVar

from pydantic import BaseModel, Field

from natz.api.common import IdentityResource
from natz.keys.nkeys import KeyClass


class NatsKeySpec(BaseModel):
    """Desired state of a NATS key."""

    type: KeyClass = Field(..., description="Operator, Account or User")
    prevent_deletion: bool = Field(default=False, description="Keep the secret when the key is deleted")
    paused: bool = False


class NatsKey(IdentityResource):
    kind: ClassVar[str] = "NatsKey"

    spec: NatsKeySpec
