# Copyright (c) Natz Contributors. All rights reserved.
# Licensed under the MIT License.
"""
Control-plane publishers.

``Publisher`` is the abstract interface; ``NatsPublisher`` talks to a real
cluster through nats-py and ``MemoryPublisher`` records messages in process.
"""

from natz.transport.base import Publisher, PublisherState
from natz.transport.memory import MemoryPublisher, PublishedMessage
from natz.transport.nats_transport import NatsPublisher

__all__ = [
    "Publisher",
    "PublisherState",
    "MemoryPublisher",
    "PublishedMessage",
    "NatsPublisher",
]
