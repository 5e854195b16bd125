# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
NatsAccount: an operator-issued account.

The import, export, limit and revocation fields use the field names of the
NATS account claim so the claim builder can copy them through unchanged.
"""

from datetime import timedelta
from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from natz.api.common import IdentityResource, KeyReference
from natz.constants import NO_LIMIT


class ExportType(str, Enum):
    """Kind of an import or export."""

    STREAM = "stream"
    SERVICE = "service"


class ResponseType(str, Enum):
    """Response semantics of a service export."""

    SINGLETON = "Singleton"
    STREAM = "Stream"
    CHUNKED = "Chunked"


class ServiceLatency(BaseModel):
    """Latency tracking for a service export."""

    sampling: int = Field(..., ge=1, le=100, description="Sampling percentage")
    results: str = Field(..., description="Subject latency results are published on")


class Import(BaseModel):
    name: str = ""
    subject: str
    account: str = Field(..., description="Public key of the exporting account")
    token: str = Field(default="", description="Activation token for private exports")
    local_subject: str = ""
    type: ExportType = ExportType.STREAM
    share: bool = False
    allow_trace: bool = False


class Export(BaseModel):
    name: str = ""
    subject: str
    type: ExportType = ExportType.STREAM
    token_req: bool = False
    revocations: dict[str, int] = Field(default_factory=dict)
    response_type: Optional[ResponseType] = None
    response_threshold: Optional[timedelta] = None
    service_latency: Optional[ServiceLatency] = None
    account_token_position: int = Field(default=0, ge=0)
    advertise: bool = False
    description: str = ""
    info_url: str = ""


class JetStreamLimits(BaseModel):
    mem_storage: int = 0
    disk_storage: int = 0
    streams: int = 0
    consumer: int = 0
    max_ack_pending: int = 0
    mem_max_stream_bytes: int = 0
    disk_max_stream_bytes: int = 0
    max_bytes_required: bool = False


class AccountLimits(JetStreamLimits):
    """Connection, subscription, payload, leaf-node and JetStream limits."""

    subs: int = NO_LIMIT
    data: int = NO_LIMIT
    payload: int = NO_LIMIT
    imports: int = NO_LIMIT
    exports: int = NO_LIMIT
    wildcards: bool = True
    disallow_bearer: bool = False
    conn: int = NO_LIMIT
    leaf: int = NO_LIMIT
    tiered_limits: dict[str, JetStreamLimits] = Field(default_factory=dict)


class NatsAccountSpec(BaseModel):
    """Desired state of an account."""

    private_key: KeyReference
    signer_key_ref: KeyReference = Field(..., description="Operator key or operator signing key")
    signing_keys: list[KeyReference] = Field(
        default_factory=list, description="Account signing-key pool used to sign users"
    )
    allowed_user_namespaces: list[str] = Field(
        default_factory=list, description="Namespaces users of this account may live in"
    )
    imports: list[Import] = Field(default_factory=list)
    exports: list[Export] = Field(default_factory=list)
    limits: AccountLimits = Field(default_factory=AccountLimits)
    revocations: dict[str, int] = Field(default_factory=dict)
    paused: bool = False


class NatsAccount(IdentityResource):
    kind: ClassVar[str] = "NatsAccount"

    spec: NatsAccountSpec
