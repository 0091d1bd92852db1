"""
Service Bus Models
Read-only snapshots and message helpers shared by the queue operations.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class QueueInfo:
    """Runtime snapshot of a queue, built fresh on every listing call."""

    name: str
    active_message_count: int
    dead_letter_message_count: int

    @classmethod
    def from_runtime_properties(cls, properties) -> 'QueueInfo':
        """Build a snapshot from the SDK's QueueRuntimeProperties."""
        return cls(
            name=properties.name,
            active_message_count=properties.active_message_count,
            dead_letter_message_count=properties.dead_letter_message_count
        )


def render_message_body(message: Any) -> str:
    """
    Render a message body as text.

    Handles the body formats the SDK hands back:
    - bytes: decode to string, undecodable bytes become U+FFFD
    - str: return as-is
    - iterable of sections: join parts, then decode
    - AMQP value (int, bool, map): its text form

    Args:
        message: A ServiceBusReceivedMessage (or anything with a `body`)

    Returns:
        str: The decoded body, empty string for an empty body
    """
    raw_body = message.body

    if raw_body is None:
        return ""
    if isinstance(raw_body, str):
        return raw_body
    if isinstance(raw_body, (bytes, bytearray)):
        return bytes(raw_body).decode('utf-8', errors='replace')
    if isinstance(raw_body, Mapping) or not hasattr(raw_body, '__iter__'):
        # AMQP value body
        return str(raw_body)

    # Sections are joined before decoding; a character may span two sections
    body_bytes = b''.join(
        bytes(part) if isinstance(part, (bytes, bytearray)) else str(part).encode('utf-8')
        for part in raw_body
    )
    return body_bytes.decode('utf-8', errors='replace')


def summarize_message(message: Any, dead_letter: bool = False, body_limit: int = 2000) -> Dict[str, Any]:
    """
    Flatten a peeked message into a JSON-friendly dict.

    Args:
        message: A ServiceBusReceivedMessage
        dead_letter (bool): Include the dead-letter reason and description
        body_limit (int): Longest body text kept

    Returns:
        Dict[str, Any]: Sequence number, ids, content type, enqueue time and body text
    """
    summary = {
        'sequence_number': message.sequence_number,
        'message_id': message.message_id,
        'content_type': message.content_type,
        'enqueued_time': message.enqueued_time_utc.isoformat() if message.enqueued_time_utc else None,
        'body': render_message_body(message)[:body_limit]
    }
    if dead_letter:
        summary['dead_letter_reason'] = message.dead_letter_reason
        summary['dead_letter_error_description'] = message.dead_letter_error_description
    return summary
