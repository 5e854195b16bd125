# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Configuration models.

Backoff timing for reconcilers and connection settings for the
control-plane publisher.
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from natz.constants import (
    DEFAULT_CONFLICT_RETRY_SECONDS,
    DEFAULT_RETRY_BASE_SECONDS,
    DEFAULT_RETRY_CEILING_SECONDS,
    DEFAULT_RETRY_MULTIPLIER,
    SUBJECT_CLAIMS_DELETE,
    SUBJECT_CLAIMS_UPDATE,
)


class BackoffConfig(BaseModel):
    """Bounded exponential backoff shared by every reconciler.

    The delay after ``n`` consecutive failures is
    ``min(base * multiplier ** (n - 1), ceiling)``.
    """

    base_seconds: float = Field(default=DEFAULT_RETRY_BASE_SECONDS, gt=0)
    multiplier: float = Field(default=DEFAULT_RETRY_MULTIPLIER, ge=1)
    ceiling_seconds: float = Field(default=DEFAULT_RETRY_CEILING_SECONDS, gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "BackoffConfig":
        if self.base_seconds > self.ceiling_seconds:
            raise ValueError("base_seconds must not exceed ceiling_seconds")
        return self

    def delay(self, failures: int) -> float:
        """Return the retry delay in seconds after ``failures`` failed passes."""
        if failures <= 0:
            return 0.0
        delay = self.base_seconds
        for _ in range(failures - 1):
            delay *= self.multiplier
            if delay >= self.ceiling_seconds:
                return self.ceiling_seconds
        return min(delay, self.ceiling_seconds)


class ReconcilerConfig(BaseModel):
    """Configuration injected into every reconciler."""

    backoff: BackoffConfig = Field(default_factory=BackoffConfig)
    conflict_retry_seconds: float = Field(default=DEFAULT_CONFLICT_RETRY_SECONDS, ge=0)


class NatsConfig(BaseModel):
    """Connection settings for the cluster control plane."""

    url: str = Field(default="nats://localhost:4222", description="Server URL")
    credentials_file: Optional[str] = Field(default=None, description="Path to a .creds file")
    max_reconnect_attempts: int = Field(default=5, ge=-1)
    reconnect_wait_seconds: float = Field(default=2.0, ge=0)
    connect_timeout_seconds: float = Field(default=10.0, gt=0)
    publish_timeout_seconds: float = Field(default=5.0, gt=0)

    update_subject: str = SUBJECT_CLAIMS_UPDATE
    delete_subject: str = SUBJECT_CLAIMS_DELETE

    @classmethod
    def from_env(cls) -> "NatsConfig":
        """Build a config from ``NATS_URL`` and ``NATS_CREDS_FILE``."""
        values: dict = {}
        if os.environ.get("NATS_URL"):
            values["url"] = os.environ["NATS_URL"]
        if os.environ.get("NATS_CREDS_FILE"):
            values["credentials_file"] = os.environ["NATS_CREDS_FILE"]
        return cls(**values)


__all__ = [
    "BackoffConfig",
    "ReconcilerConfig",
    "NatsConfig",
]
