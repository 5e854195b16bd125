# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""NatsActivation: a time-bounded grant to import a private export."""

from datetime import datetime
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, model_validator

from natz.api.account import ExportType
from natz.api.common import AccountReference, IdentityResource, KeyReference


class NatsActivationSpec(BaseModel):
    """Desired state of an activation."""

    account_ref: AccountReference = Field(..., description="The exporting account")
    signer_key_ref: KeyReference = Field(..., description="Key of the exporting account")
    target_account_ref: AccountReference = Field(..., description="The importing account")
    subject: str
    start: Optional[datetime] = None
    expiry: Optional[datetime] = None
    export_type: ExportType = ExportType.STREAM
    paused: bool = False

    @model_validator(mode="after")
    def _check_window(self) -> "NatsActivationSpec":
        if self.start and self.expiry and self.expiry <= self.start:
            raise ValueError("expiry must be after start")
        return self


class NatsActivation(IdentityResource):
    kind: ClassVar[str] = "NatsActivation"

    spec: NatsActivationSpec
