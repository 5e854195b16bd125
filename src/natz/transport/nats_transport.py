# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""NATS publisher built on nats-py.

Connects with the configured credentials, publishes control messages and
flushes after each one so a failed delivery surfaces as PublishError instead
of being lost in the client's write buffer.
"""

import asyncio
import logging
from typing import Any, Optional

import nats
from nats.errors import Error as NatsClientError

from natz.config import NatsConfig
from natz.exceptions import PublishError
from natz.transport.base import Publisher, PublisherState

logger = logging.getLogger(__name__)


class NatsPublisher(Publisher):
    """Publisher for a NATS cluster's system account."""

    def __init__(self, config: Optional[NatsConfig] = None) -> None:
        super().__init__(config)
        self._nc: Optional[Any] = None

    async def connect(self) -> None:
        if self.is_connected:
            return
        self._state = PublisherState.CONNECTING

        options: dict[str, Any] = {
            "servers": [self.config.url],
            "max_reconnect_attempts": self.config.max_reconnect_attempts,
            "reconnect_time_wait": self.config.reconnect_wait_seconds,
            "connect_timeout": self.config.connect_timeout_seconds,
            "error_cb": self._error_handler,
            "disconnected_cb": self._disconnected_handler,
            "reconnected_cb": self._reconnected_handler,
            "closed_cb": self._closed_handler,
        }
        if self.config.credentials_file:
            options["user_credentials"] = self.config.credentials_file

        try:
            self._nc = await nats.connect(**options)
        except (NatsClientError, OSError, asyncio.TimeoutError) as exc:
            self._state = PublisherState.DISCONNECTED
            logger.error("Failed to connect to NATS at %s: %s", self.config.url, exc)
            raise PublishError(f"failed to connect to {self.config.url}: {exc}") from exc

        self._state = PublisherState.CONNECTED
        logger.info("Connected to NATS at %s", self.config.url)

    async def disconnect(self) -> None:
        if self._nc is None:
            return
        timeout = self.config.publish_timeout_seconds
        try:
            await asyncio.wait_for(self._nc.drain(), timeout=timeout)
        except (NatsClientError, asyncio.TimeoutError) as exc:
            logger.warning("NATS drain did not complete (%s), forcing close", exc)
            await self._nc.close()
        self._nc = None
        self._state = PublisherState.DISCONNECTED
        logger.info("Disconnected from NATS")

    async def publish(self, subject: str, data: bytes) -> None:
        if self._nc is None or not self.is_connected:
            raise PublishError(f"not connected, cannot publish on {subject}")
        try:
            await self._nc.publish(subject, data)
            await self._nc.flush(timeout=self.config.publish_timeout_seconds)
        except (NatsClientError, asyncio.TimeoutError) as exc:
            logger.error("Failed to publish on %s: %s", subject, exc)
            raise PublishError(f"failed to publish on {subject}: {exc}") from exc
        logger.debug("Published %d bytes on %s", len(data), subject)

    async def _error_handler(self, exc: Exception) -> None:
        logger.error("NATS error: %s", exc)

    async def _disconnected_handler(self) -> None:
        if self._state == PublisherState.CONNECTED:
            self._state = PublisherState.RECONNECTING
        logger.warning("NATS connection lost")

    async def _reconnected_handler(self) -> None:
        self._state = PublisherState.CONNECTED
        logger.info("NATS connection re-established")

    async def _closed_handler(self) -> None:
        self._state = PublisherState.DISCONNECTED
        logger.info("NATS connection closed")


__all__ = ["NatsPublisher"]
