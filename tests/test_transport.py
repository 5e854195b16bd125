"""Tests for control-plane publishers."""

from unittest.mock import AsyncMock, patch

import pytest
from nats.errors import Error as NatsClientError

from natz.config import NatsConfig
from natz.exceptions import PublishError
from natz.transport import MemoryPublisher, NatsPublisher, Publisher, PublisherState


class TestMemoryPublisher:
    @pytest.mark.asyncio
    async def test_records_messages(self, publisher):
        await publisher.publish_update("account.jwt")
        await publisher.publish_delete("revocation.jwt")

        assert publisher.on_subject("$SYS.REQ.CLAIMS.UPDATE") == [b"account.jwt"]
        assert publisher.on_subject("$SYS.REQ.CLAIMS.DELETE") == [b"revocation.jwt"]

    @pytest.mark.asyncio
    async def test_custom_subjects(self):
        publisher = MemoryPublisher(NatsConfig(update_subject="claims.update"))
        await publisher.connect()
        await publisher.publish_update("t")
        assert publisher.messages[0].subject == "claims.update"

    @pytest.mark.asyncio
    async def test_fail_flag(self, publisher):
        publisher.fail = True
        with pytest.raises(PublishError):
            await publisher.publish_update("t")
        assert publisher.messages == []

    @pytest.mark.asyncio
    async def test_not_connected(self):
        publisher = MemoryPublisher()
        assert isinstance(publisher, Publisher)
        assert publisher.state == PublisherState.DISCONNECTED
        with pytest.raises(PublishError):
            await publisher.publish_update("t")


class TestNatsPublisher:
    @pytest.mark.asyncio
    async def test_publish_requires_connection(self):
        publisher = NatsPublisher()
        with pytest.raises(PublishError):
            await publisher.publish("$SYS.REQ.CLAIMS.UPDATE", b"t")

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        publisher = NatsPublisher(NatsConfig(url="nats://127.0.0.1:1"))
        with patch("nats.connect", AsyncMock(side_effect=OSError("refused"))):
            with pytest.raises(PublishError):
                await publisher.connect()
        assert publisher.state == PublisherState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_passes_credentials(self):
        client = AsyncMock()
        config = NatsConfig(credentials_file="/etc/natz/sys.creds")
        with patch("nats.connect", AsyncMock(return_value=client)) as connect:
            publisher = NatsPublisher(config)
            await publisher.connect()

        kwargs = connect.call_args.kwargs
        assert kwargs["servers"] == ["nats://localhost:4222"]
        assert kwargs["user_credentials"] == "/etc/natz/sys.creds"
        assert publisher.is_connected

    @pytest.mark.asyncio
    async def test_publish_flushes(self):
        client = AsyncMock()
        with patch("nats.connect", AsyncMock(return_value=client)):
            publisher = NatsPublisher()
            await publisher.connect()

        await publisher.publish_update("account.jwt")

        client.publish.assert_awaited_once_with("$SYS.REQ.CLAIMS.UPDATE", b"account.jwt")
        client.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_flush_failure_raises_publish_error(self):
        client = AsyncMock()
        client.flush.side_effect = NatsClientError("no responders")
        with patch("nats.connect", AsyncMock(return_value=client)):
            publisher = NatsPublisher()
            await publisher.connect()

        with pytest.raises(PublishError):
            await publisher.publish_delete("revocation.jwt")

    @pytest.mark.asyncio
    async def test_disconnect_drains(self):
        client = AsyncMock()
        with patch("nats.connect", AsyncMock(return_value=client)):
            publisher = NatsPublisher()
            await publisher.connect()

        await publisher.disconnect()

        client.drain.assert_awaited_once()
        assert publisher.state == PublisherState.DISCONNECTED
