# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Opaque secret records held by the secret store."""

from typing import ClassVar, Optional

from pydantic import Field

from natz.api.common import Resource


class Secret(Resource):
    kind: ClassVar[str] = "Secret"

    type: str = ""
    data: dict[str, bytes] = Field(default_factory=dict)

    def get(self, key: str) -> Optional[bytes]:
        return self.data.get(key)
