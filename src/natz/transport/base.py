# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""Abstract publisher interface for the cluster control plane.

The engine sends exactly two kinds of message: account tokens on the claims
update subject and signed revocations on the claims delete subject. Any
backend able to deliver raw bytes to a subject can carry them.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from natz.config import NatsConfig


class PublisherState(str, Enum):
    """Publisher connection state."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class Publisher(ABC):
    """Abstract base class for control-plane publishers."""

    def __init__(self, config: Optional[NatsConfig] = None) -> None:
        """Initialize publisher with configuration."""
        self.config = config or NatsConfig()
        self._state = PublisherState.DISCONNECTED

    @property
    def state(self) -> PublisherState:
        """Current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Whether the publisher is currently connected."""
        return self._state == PublisherState.CONNECTED

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the cluster.

        Raises:
            PublishError: If the connection cannot be established.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Gracefully close the connection."""

    @abstractmethod
    async def publish(self, subject: str, data: bytes) -> None:
        """Publish ``data`` on ``subject``.

        Raises:
            PublishError: If not connected or the message was not delivered
                to the server.
        """

    async def publish_update(self, token: str) -> None:
        """Publish an account token on the claims update subject."""
        await self.publish(self.config.update_subject, token.encode("ascii"))

    async def publish_delete(self, token: str) -> None:
        """Publish a signed revocation on the claims delete subject."""
        await self.publish(self.config.delete_subject, token.encode("ascii"))


__all__ = [
    "Publisher",
    "PublisherState",
]
