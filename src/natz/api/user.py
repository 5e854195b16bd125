# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""NatsUser: an account-issued user credential."""

from datetime import timedelta
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from natz.api.common import AccountReference, IdentityResource, KeyReference
from natz.constants import NO_LIMIT


class Permission(BaseModel):
    """Allow/deny subject patterns for one direction."""

    allow: list[str] = Field(default_factory=list)
    deny: list[str] = Field(default_factory=list)


class ResponsePermission(BaseModel):
    max: int = Field(default=1, description="Maximum number of responses")
    ttl: Optional[timedelta] = Field(default=None, description="How long the permission lasts")


class Permissions(BaseModel):
    pub: Permission = Field(default_factory=Permission)
    sub: Permission = Field(default_factory=Permission)
    resp: Optional[ResponsePermission] = None


class TimeRange(BaseModel):
    """A daily connection window, ``HH:MM:SS`` in ``times_location``."""

    start: str
    end: str


class UserLimits(BaseModel):
    src: list[str] = Field(default_factory=list, description="Allowed source CIDRs")
    times: list[TimeRange] = Field(default_factory=list)
    times_location: str = ""
    subs: int = NO_LIMIT
    data: int = NO_LIMIT
    payload: int = NO_LIMIT


class NatsUserSpec(BaseModel):
    """Desired state of a user."""

    private_key: KeyReference
    signer_key_ref: KeyReference = Field(..., description="Account key or account signing key")
    account_ref: AccountReference
    permissions: Permissions = Field(default_factory=Permissions)
    limits: UserLimits = Field(default_factory=UserLimits)
    bearer_token: bool = False
    allowed_connection_types: list[str] = Field(default_factory=list)
    paused: bool = False


class NatsUser(IdentityResource):
    kind: ClassVar[str] = "NatsUser"

    spec: NatsUserSpec

    @property
    def credentials_secret_name(self) -> str:
        return f"{self.metadata.name}-credentials"
