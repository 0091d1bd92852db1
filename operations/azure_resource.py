"""
Azure Resource Naming
Well-known Service Bus naming conventions used to address namespaces and sub-queues.
"""

SERVICEBUS_DNS_SUFFIX = ".servicebus.windows.net"
DEAD_LETTER_QUEUE_SUFFIX = "/$deadletterqueue"


def get_fully_qualified_namespace(resource_name: str) -> str:
    """
    Build the fully qualified namespace host for a Service Bus resource.

    Args:
        resource_name (str): Short namespace name, e.g. 'contoso-bus'

    Returns:
        str: Namespace host, e.g. 'contoso-bus.servicebus.windows.net'
    """
    return f"{resource_name}{SERVICEBUS_DNS_SUFFIX}"


def get_dead_letter_queue_name(queue_name: str) -> str:
    """
    Build the entity path of the dead-letter sub-queue of a queue.

    Not idempotent: applying it to a dead-letter path nests the suffix again.

    Args:
        queue_name (str): Name of the parent queue

    Returns:
        str: Dead-letter entity path, e.g. 'orders/$deadletterqueue'
    """
    return f"{queue_name}{DEAD_LETTER_QUEUE_SUFFIX}"
