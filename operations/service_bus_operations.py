"""
Service Bus Operations
Read-only inspection of Azure Service Bus queues: listing, peeking, paging and searching
active and dead-lettered messages, plus publishing messages.
"""

import asyncio
from typing import AsyncIterator, Iterable, List, Optional

from azure.servicebus import ServiceBusMessage, ServiceBusReceivedMessage
from azure.servicebus.aio import ServiceBusClient
from azure.servicebus.aio.management import ServiceBusAdministrationClient
from azure.identity.aio import DefaultAzureCredential

from config.azure_config import AzureConfig
from operations.azure_resource import get_dead_letter_queue_name, get_fully_qualified_namespace
from operations.service_bus_models import QueueInfo, render_message_body
from utils.logger import console_info, console_debug, console_error

# Page size used internally by search, independent of caller page sizes
SEARCH_PAGE_SIZE = 100


class ServiceBusOperations:
    def __init__(self, admin_client: ServiceBusAdministrationClient, client: ServiceBusClient, credential=None):
        """
        Initialize the ServiceBusOperations class.

        Args:
            admin_client: Async administration client used to list queues
            client: Async client used to peek and send
            credential: Credential owned by this instance, closed by close()
        """
        self.admin_client = admin_client
        self.client = client
        self._credential = credential

    @classmethod
    def from_namespace(cls, namespace_name: str, credential=None) -> 'ServiceBusOperations':
        """
        Build both Service Bus clients for a namespace.

        Args:
            namespace_name (str): Short namespace name, without the DNS suffix
            credential: Async token credential; a DefaultAzureCredential is created
                (and owned) when omitted

        Returns:
            ServiceBusOperations: Operations bound to the namespace
        """
        if not namespace_name:
            raise ValueError("namespace_name is required")

        owned_credential = None
        if credential is None:
            credential = owned_credential = DefaultAzureCredential()

        fully_qualified_namespace = get_fully_qualified_namespace(namespace_name)
        admin_client = ServiceBusAdministrationClient(fully_qualified_namespace, credential)
        client = ServiceBusClient(fully_qualified_namespace, credential)

        console_info(f"Service Bus Operations initialized for namespace: {fully_qualified_namespace}", "ServiceBusOps")
        return cls(admin_client, client, credential=owned_credential)

    @classmethod
    def from_config(cls, azure_config: Optional[AzureConfig] = None) -> 'ServiceBusOperations':
        """Build operations for the namespace named in the environment configuration."""
        azure_config = azure_config or AzureConfig()
        namespace_name = azure_config.get_servicebus_namespace()
        if not namespace_name:
            raise ValueError("AZURE_SERVICEBUS_NAMESPACE_NAME environment variable is required")
        return cls.from_namespace(namespace_name)

    async def close(self):
        """Close both clients and the owned credential, if any."""
        try:
            await self.client.close()
            await self.admin_client.close()
        finally:
            if self._credential is not None:
                await self._credential.close()
                self._credential = None
        console_debug("Service Bus clients closed", "ServiceBusOps")

    async def __aenter__(self) -> 'ServiceBusOperations':
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def list_queues(self, cancel_event: Optional[asyncio.Event] = None) -> AsyncIterator[QueueInfo]:
        """
        List every queue in the namespace with its runtime message counts.

        Each call re-queries the broker; queues arrive in broker order.

        Args:
            cancel_event (asyncio.Event, optional): Checked before each queue after the first

        Yields:
            QueueInfo: Snapshot of one queue
        """
        console_debug("Listing queues", "ServiceBusOps")
        first_queue = True
        async for properties in self.admin_client.list_queues_runtime_properties():
            if not first_queue:
                _raise_if_cancelled(cancel_event, "queues")
            first_queue = False
            yield QueueInfo.from_runtime_properties(properties)

    async def get_active_queue_messages(self, queue_name: str, max_page_size: int) -> List[ServiceBusReceivedMessage]:
        """Peek up to max_page_size messages from the start of a queue."""
        return await self._get_messages(queue_name, max_page_size)

    async def get_dead_letter_messages(self, queue_name: str, max_page_size: int) -> List[ServiceBusReceivedMessage]:
        """Peek up to max_page_size messages from the start of a queue's dead-letter sub-queue."""
        return await self._get_messages(get_dead_letter_queue_name(queue_name), max_page_size)

    def get_paged_active_queue_messages(
        self,
        queue_name: str,
        max_page_size: int,
        sequence_number: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[List[ServiceBusReceivedMessage]]:
        """Page through a queue, max_page_size messages at a time, starting at sequence_number."""
        return self._get_paged_messages(queue_name, max_page_size, sequence_number, cancel_event)

    def get_paged_dead_letter_queue_messages(
        self,
        queue_name: str,
        max_page_size: int,
        sequence_number: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[List[ServiceBusReceivedMessage]]:
        """Page through a queue's dead-letter sub-queue."""
        return self._get_paged_messages(
            get_dead_letter_queue_name(queue_name), max_page_size, sequence_number, cancel_event
        )

    def search_active_queue_messages(
        self,
        queue_name: str,
        condition: str,
        limit: int,
        sequence_number: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[ServiceBusReceivedMessage]:
        """Yield up to limit messages of a queue whose body contains condition."""
        return self._search_messages(queue_name, condition, limit, sequence_number, cancel_event)

    def search_dead_letter_queue_messages(
        self,
        queue_name: str,
        condition: str,
        limit: int,
        sequence_number: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> AsyncIterator[ServiceBusReceivedMessage]:
        """Yield up to limit dead-lettered messages of a queue whose body contains condition."""
        return self._search_messages(
            get_dead_letter_queue_name(queue_name), condition, limit, sequence_number, cancel_event
        )

    async def send_message(self, queue_name: str, message: str, content_type: str):
        """
        Send a single message to a queue.

        Args:
            queue_name (str): Target queue
            message (str): Message payload as raw text or JSON
            content_type (str): Content type stamped on the message
        """
        try:
            async with self.client.get_queue_sender(queue_name=queue_name) as sender:
                await sender.send_messages(ServiceBusMessage(message, content_type=content_type))
            console_info(f"Sent message to queue '{queue_name}'", "ServiceBusOps")
        except Exception as e:
            console_error(f"Failed to send message to queue '{queue_name}': {e}", "ServiceBusOps")
            raise

    async def send_messages(self, queue_name: str, messages: Iterable[str], content_type: str):
        """
        Send several messages to a queue in one call.

        The whole call fails if the underlying send fails; there is no
        per-message result.

        Args:
            queue_name (str): Target queue
            messages (Iterable[str]): Message payloads
            content_type (str): Content type stamped on every message
        """
        batch = [ServiceBusMessage(message, content_type=content_type) for message in messages]
        try:
            async with self.client.get_queue_sender(queue_name=queue_name) as sender:
                await sender.send_messages(batch)
            console_info(f"Sent {len(batch)} messages to queue '{queue_name}'", "ServiceBusOps")
        except Exception as e:
            console_error(f"Failed to send {len(batch)} messages to queue '{queue_name}': {e}", "ServiceBusOps")
            raise

    def _get_receiver(self, queue_name: str):
        return self.client.get_queue_receiver(queue_name=queue_name)

    async def _get_messages(self, queue_name: str, max_page_size: int) -> List[ServiceBusReceivedMessage]:
        if max_page_size < 1:
            raise ValueError("max_page_size must be greater than or equal to 1")

        console_debug(f"Peeking up to {max_page_size} messages from '{queue_name}'", "ServiceBusOps")
        async with self._get_receiver(queue_name) as receiver:
            return await receiver.peek_messages(max_message_count=max_page_size)

    def _get_paged_messages(
        self,
        queue_name: str,
        max_page_size: int,
        sequence_number: Optional[int],
        cancel_event: Optional[asyncio.Event]
    ) -> AsyncIterator[List[ServiceBusReceivedMessage]]:
        # Raised at call time, before any receiver is opened
        if max_page_size < 1:
            raise ValueError("max_page_size must be greater than or equal to 1")
        return self._iterate_pages(queue_name, max_page_size, sequence_number, cancel_event)

    async def _iterate_pages(
        self,
        queue_name: str,
        max_page_size: int,
        sequence_number: Optional[int],
        cancel_event: Optional[asyncio.Event]
    ) -> AsyncIterator[List[ServiceBusReceivedMessage]]:
        async with self._get_receiver(queue_name) as receiver:
            first_page = True
            while True:
                if not first_page:
                    _raise_if_cancelled(cancel_event, queue_name)
                first_page = False

                messages = await _peek(receiver, max_page_size, sequence_number)
                console_debug(
                    f"Peeked {len(messages)} messages from '{queue_name}' at sequence {sequence_number}",
                    "ServiceBusOps"
                )
                if not messages:
                    return

                yield messages

                if len(messages) < max_page_size:
                    return
                sequence_number = messages[-1].sequence_number + 1

    def _search_messages(
        self,
        queue_name: str,
        condition: str,
        limit: int,
        sequence_number: Optional[int],
        cancel_event: Optional[asyncio.Event]
    ) -> AsyncIterator[ServiceBusReceivedMessage]:
        if limit < 1:
            raise ValueError("limit must be greater than or equal to 1")
        return self._iterate_matches(queue_name, condition, limit, sequence_number, cancel_event)

    async def _iterate_matches(
        self,
        queue_name: str,
        condition: str,
        limit: int,
        sequence_number: Optional[int],
        cancel_event: Optional[asyncio.Event]
    ) -> AsyncIterator[ServiceBusReceivedMessage]:
        console_debug(f"Searching '{queue_name}' for '{condition}' (limit {limit})", "ServiceBusOps")
        hit_count = 0
        async with self._get_receiver(queue_name) as receiver:
            first_page = True
            while True:
                if not first_page:
                    _raise_if_cancelled(cancel_event, queue_name)
                first_page = False

                messages = await _peek(receiver, SEARCH_PAGE_SIZE, sequence_number)

                for message in messages:
                    if condition in render_message_body(message):
                        hit_count += 1
                        yield message
                        if hit_count >= limit:
                            return

                if len(messages) < SEARCH_PAGE_SIZE:
                    return
                sequence_number = messages[-1].sequence_number + 1


async def _peek(receiver, max_message_count: int, sequence_number: Optional[int]) -> List[ServiceBusReceivedMessage]:
    if sequence_number is None:
        return await receiver.peek_messages(max_message_count=max_message_count)
    return await receiver.peek_messages(max_message_count=max_message_count, sequence_number=sequence_number)


def _raise_if_cancelled(cancel_event: Optional[asyncio.Event], source: str):
    if cancel_event is not None and cancel_event.is_set():
        console_debug(f"Reading '{source}' cancelled", "ServiceBusOps")
        raise asyncio.CancelledError()
