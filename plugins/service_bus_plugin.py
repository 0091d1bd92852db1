import logging
from typing import Annotated, Dict, Any, List
from semantic_kernel.functions import kernel_function
from operations.service_bus_models import summarize_message
from operations.service_bus_operations import ServiceBusOperations

# Initialize logger
logger = logging.getLogger(__name__)


class ServiceBusPlugin:
    def __init__(self, operations: ServiceBusOperations):
        self.operations = operations

    @kernel_function(
        description="""
        List the queues of the Service Bus namespace with their message counts.

        USE THIS WHEN:
        - Finding out which queues exist
        - Checking which queues have a backlog or dead-lettered messages
        """
    )
    async def list_queues(self) -> Annotated[List[Dict[str, Any]], "Returns one entry per queue with active and dead-letter counts."]:
        queues = []
        async for queue in self.operations.list_queues():
            queues.append({
                "name": queue.name,
                "active_message_count": queue.active_message_count,
                "dead_letter_message_count": queue.dead_letter_message_count
            })
        logger.info(f"Listed {len(queues)} queues")
        return queues

    @kernel_function(
        description="""
        Peek the oldest messages of a queue without removing or locking them.

        USE THIS WHEN:
        - Looking at what is waiting in a queue
        - Inspecting dead-lettered messages (set dead_letter to true)
        """
    )
    async def peek_messages(self, queue_name: Annotated[str, "Name of the queue"],
                            max_messages: Annotated[int, "Maximum number of messages to return"] = 10,
                            dead_letter: Annotated[bool, "Read the dead-letter sub-queue instead of the queue"] = False) -> Annotated[List[Dict[str, Any]], "Returns the peeked messages."]:

        if not queue_name:
            raise ValueError("queue_name is required")

        if dead_letter:
            messages = await self.operations.get_dead_letter_messages(queue_name, max_messages)
        else:
            messages = await self.operations.get_active_queue_messages(queue_name, max_messages)

        return [summarize_message(message, dead_letter) for message in messages]

    @kernel_function(
        description="""
        Search a queue for messages whose body contains a piece of text (case-sensitive).

        USE THIS WHEN:
        - Locating a message by an identifier found in its payload
        - Checking whether a given order or event reached the dead-letter queue

        COMMON USE CASES:
        - "Find messages mentioning order 12345 in the orders queue"
        - "Search the dead-letter queue of payments for 'timeout'"
        """
    )
    async def search_messages(self, queue_name: Annotated[str, "Name of the queue"],
                              condition: Annotated[str, "Text the message body must contain"],
                              limit: Annotated[int, "Maximum number of matches to return"] = 10,
                              dead_letter: Annotated[bool, "Search the dead-letter sub-queue instead of the queue"] = False) -> Annotated[List[Dict[str, Any]], "Returns the matching messages."]:

        if not queue_name or not condition:
            raise ValueError("queue_name and condition are required")

        if dead_letter:
            matches = self.operations.search_dead_letter_queue_messages(queue_name, condition, limit)
        else:
            matches = self.operations.search_active_queue_messages(queue_name, condition, limit)

        results = [summarize_message(message, dead_letter) async for message in matches]
        logger.info(f"Search for '{condition}' in '{queue_name}' found {len(results)} messages")
        return results

    @kernel_function(
        description="""
        Publish a message to a queue.

        USE THIS WHEN:
        - Replaying a payload onto a queue
        - Sending a test message
        """
    )
    async def send_message(self, queue_name: Annotated[str, "Name of the queue"],
                           message: Annotated[str, "Message payload as raw text or JSON"],
                           content_type: Annotated[str, "Content type of the payload"] = "application/json") -> Annotated[Dict[str, Any], "Returns message sending status."]:

        if not queue_name or not message:
            raise ValueError("queue_name and message are required")

        try:
            await self.operations.send_message(queue_name, message, content_type)
        except Exception as e:
            logger.error(f"Error sending message to '{queue_name}': {str(e)}")
            raise

        return {
            "success": True,
            "queue_name": queue_name,
            "content_type": content_type,
            "message": f"Message sent to queue '{queue_name}'"
        }
