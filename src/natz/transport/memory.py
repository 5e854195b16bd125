# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""In-memory publisher that records messages, for development and testing."""

import logging
from dataclasses import dataclass
from typing import Optional

from natz.config import NatsConfig
from natz.exceptions import PublishError
from natz.transport.base import Publisher, PublisherState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishedMessage:
    subject: str
    data: bytes


class MemoryPublisher(Publisher):
    """Publisher that appends every message to ``messages``.

    Set ``fail`` to make subsequent publishes raise PublishError.
    """

    def __init__(self, config: Optional[NatsConfig] = None) -> None:
        super().__init__(config)
        self.messages: list[PublishedMessage] = []
        self.fail = False

    async def connect(self) -> None:
        self._state = PublisherState.CONNECTED

    async def disconnect(self) -> None:
        self._state = PublisherState.DISCONNECTED

    async def publish(self, subject: str, data: bytes) -> None:
        if self.fail:
            raise PublishError(f"publish on {subject} rejected")
        if not self.is_connected:
            raise PublishError(f"not connected, cannot publish on {subject}")
        self.messages.append(PublishedMessage(subject, bytes(data)))
        logger.debug("Recorded %d bytes on %s", len(data), subject)

    def on_subject(self, subject: str) -> list[bytes]:
        """Payloads published on ``subject``, oldest first."""
        return [m.data for m in self.messages if m.subject == subject]


__all__ = [
    "MemoryPublisher",
    "PublishedMessage",
]
