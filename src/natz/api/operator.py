# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""NatsOperator: the self-signed root of the trust chain."""

from typing import ClassVar

from pydantic import BaseModel, Field

from natz.api.common import IdentityResource, KeyReference


class NatsOperatorSpec(BaseModel):
    """Desired state of an operator."""

    private_key: KeyReference
    signing_keys: list[KeyReference] = Field(
        default_factory=list, description="Additional keys allowed to sign accounts"
    )
    prevent_deletion: bool = False
    paused: bool = False


class NatsOperator(IdentityResource):
    kind: ClassVar[str] = "NatsOperator"

    spec: NatsOperatorSpec
