"""
Module: conftest.py
Description: Shared pytest fixtures for Service Bus Diver tests.

Provides in-memory doubles for the Azure Service Bus clients so queue
operations can be exercised without a namespace. The doubles record every
receiver, sender and peek call for assertions.
"""

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from operations.service_bus_operations import ServiceBusOperations


def make_message(sequence_number, body, content_type="application/json", **extra):
    """Build a stand-in for ServiceBusReceivedMessage."""
    fields = {
        "sequence_number": sequence_number,
        "body": body,
        "content_type": content_type,
        "message_id": f"msg-{sequence_number}",
        "enqueued_time_utc": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "dead_letter_reason": None,
        "dead_letter_error_description": None,
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


class FakeReceiver:
    """Peek-only receiver over an ordered list of messages."""

    def __init__(self, queue_name, messages):
        self.queue_name = queue_name
        self.messages = messages
        self.peek_calls = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def peek_messages(self, max_message_count=1, sequence_number=0):
        self.peek_calls.append((max_message_count, sequence_number))
        remaining = [m for m in self.messages if m.sequence_number >= sequence_number]
        return remaining[:max_message_count]


class FakeSender:
    def __init__(self, queue_name, error=None):
        self.queue_name = queue_name
        self.sent = []
        self.error = error
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True

    async def send_messages(self, message):
        if self.error is not None:
            raise self.error
        self.sent.append(message)


class FakeServiceBusClient:
    """Stands in for azure.servicebus.aio.ServiceBusClient."""

    def __init__(self):
        self.queues = {}
        self.receivers = []
        self.senders = []
        self.send_error = None
        self.close = AsyncMock()

    def add_messages(self, queue_name, bodies, first_sequence_number=1):
        messages = [
            make_message(first_sequence_number + offset, body)
            for offset, body in enumerate(bodies)
        ]
        self.queues[queue_name] = messages
        return messages

    def get_queue_receiver(self, queue_name, **kwargs):
        receiver = FakeReceiver(queue_name, self.queues.get(queue_name, []))
        self.receivers.append(receiver)
        return receiver

    def get_queue_sender(self, queue_name, **kwargs):
        sender = FakeSender(queue_name, self.send_error)
        self.senders.append(sender)
        return sender

    @property
    def peek_calls(self):
        return [call for receiver in self.receivers for call in receiver.peek_calls]


class FakeAsyncPaged:
    """Async iterable like azure.core.async_paging.AsyncItemPaged."""

    def __init__(self, items):
        self.items = items

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for item in self.items:
            yield item


@pytest.fixture
def servicebus_client():
    return FakeServiceBusClient()


@pytest.fixture
def admin_client():
    client = MagicMock()
    client.close = AsyncMock()
    client.list_queues_runtime_properties.return_value = FakeAsyncPaged([
        SimpleNamespace(name="orders", active_message_count=12, dead_letter_message_count=3),
        SimpleNamespace(name="payments", active_message_count=0, dead_letter_message_count=0),
    ])
    return client


@pytest.fixture
def operations(admin_client, servicebus_client):
    return ServiceBusOperations(admin_client, servicebus_client)
