"""

Service Bus Diver - Command Line Entry Point

Lists queues, peeks, pages and searches active and dead-lettered messages,
and publishes messages to Azure Service Bus queues.

"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from typing import List, Optional

from dotenv import load_dotenv

from config.azure_config import AzureConfig
from operations.service_bus_models import summarize_message
from operations.service_bus_operations import ServiceBusOperations
from utils.logger import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_CANCELLED = 130

# Commands that check the cancel event between pages or queues
CANCELLABLE_COMMANDS = {"queues", "pages", "search"}


def build_parser(azure_config: AzureConfig) -> argparse.ArgumentParser:
    """Build the argument parser; defaults come from the environment configuration."""
    parser = argparse.ArgumentParser(
        prog="sb-diver",
        description="Inspect and publish to Azure Service Bus queues"
    )
    parser.add_argument("--namespace", help="Service Bus namespace name (overrides AZURE_SERVICEBUS_NAMESPACE_NAME)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("queues", help="List queues with active and dead-letter counts")

    peek = subparsers.add_parser("peek", help="Peek the oldest messages of a queue")
    peek.add_argument("queue")
    peek.add_argument("--max", type=int, default=azure_config.get_default_page_size())
    peek.add_argument("--dead-letter", action="store_true")

    pages = subparsers.add_parser("pages", help="Page through every message of a queue")
    pages.add_argument("queue")
    pages.add_argument("--page-size", type=int, default=azure_config.get_default_page_size())
    pages.add_argument("--from-sequence", type=int, default=None)
    pages.add_argument("--dead-letter", action="store_true")

    search = subparsers.add_parser("search", help="Find messages whose body contains some text")
    search.add_argument("queue")
    search.add_argument("condition")
    search.add_argument("--limit", type=int, default=azure_config.get_default_search_limit())
    search.add_argument("--from-sequence", type=int, default=None)
    search.add_argument("--dead-letter", action="store_true")

    send = subparsers.add_parser("send", help="Send one or more messages to a queue")
    send.add_argument("queue")
    send.add_argument("messages", nargs="+")
    send.add_argument("--content-type", default=azure_config.get_default_content_type())

    return parser


def _print_json(payload):
    print(json.dumps(payload, ensure_ascii=False))


async def run_command(operations: ServiceBusOperations, args: argparse.Namespace, cancel_event: asyncio.Event) -> int:
    """Dispatch one parsed command against the operations instance."""
    if args.command == "queues":
        async for queue in operations.list_queues(cancel_event):
            _print_json({
                "name": queue.name,
                "active_message_count": queue.active_message_count,
                "dead_letter_message_count": queue.dead_letter_message_count
            })

    elif args.command == "peek":
        if args.dead_letter:
            messages = await operations.get_dead_letter_messages(args.queue, args.max)
        else:
            messages = await operations.get_active_queue_messages(args.queue, args.max)
        for message in messages:
            _print_json(summarize_message(message, args.dead_letter))

    elif args.command == "pages":
        if args.dead_letter:
            pages = operations.get_paged_dead_letter_queue_messages(
                args.queue, args.page_size, args.from_sequence, cancel_event
            )
        else:
            pages = operations.get_paged_active_queue_messages(
                args.queue, args.page_size, args.from_sequence, cancel_event
            )
        page_number = 0
        async for page in pages:
            page_number += 1
            logger.info(f"📄 Page {page_number}: {len(page)} messages")
            for message in page:
                _print_json(summarize_message(message, args.dead_letter))

    elif args.command == "search":
        if args.dead_letter:
            matches = operations.search_dead_letter_queue_messages(
                args.queue, args.condition, args.limit, args.from_sequence, cancel_event
            )
        else:
            matches = operations.search_active_queue_messages(
                args.queue, args.condition, args.limit, args.from_sequence, cancel_event
            )
        async for message in matches:
            _print_json(summarize_message(message, args.dead_letter))

    elif args.command == "send":
        if len(args.messages) == 1:
            await operations.send_message(args.queue, args.messages[0], args.content_type)
        else:
            await operations.send_messages(args.queue, args.messages, args.content_type)

    return EXIT_OK


def setup_signal_handlers(cancel_event: asyncio.Event, cooperative: bool = True):
    """
    Route SIGINT and SIGTERM to the running command.

    Cooperative commands stop between pages on the first signal and are
    interrupted on the second; other commands are interrupted on the first.
    """
    def signal_handler(signum, frame):
        if cancel_event.is_set() or not cooperative:
            logger.info(f"📡 Received signal {signum}. Interrupting...")
            raise KeyboardInterrupt()
        logger.info(f"📡 Received signal {signum}. Stopping after the current page...")
        cancel_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for Service Bus Diver."""
    azure_config = AzureConfig()
    try:
        parser = build_parser(azure_config)
    except ValueError as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR
    args = parser.parse_args(argv)

    namespace_name = args.namespace or azure_config.get_servicebus_namespace()
    if not namespace_name:
        logger.error("❌ No Service Bus namespace configured")
        print(azure_config.get_configuration_summary(), file=sys.stderr)
        return EXIT_CONFIG_ERROR

    cancel_event = asyncio.Event()
    setup_signal_handlers(cancel_event, args.command in CANCELLABLE_COMMANDS)

    try:
        async with ServiceBusOperations.from_namespace(namespace_name) as operations:
            return await run_command(operations, args, cancel_event)
    except asyncio.CancelledError:
        logger.info("⚠️  Cancelled")
        return EXIT_CANCELLED
    except ValueError as e:
        logger.error(f"❌ Invalid argument: {e}")
        return EXIT_ERROR
    except Exception as e:
        logger.error(f"❌ {args.command} failed: {e}")
        return EXIT_ERROR


def run():
    """Console script entry point."""
    # Load environment variables from .env file
    load_dotenv()
    azure_config = AzureConfig()
    configure_logging(azure_config.get_log_level(), azure_config.get_log_dir())
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(EXIT_CANCELLED)


if __name__ == "__main__":
    run()
