"""
Unified Logging System
All logging goes through Python's logging module for both console and file output.
"""
import logging
import os
import sys
from datetime import datetime
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Azure SDK loggers that flood the console at INFO level
NOISY_AZURE_LOGGERS = [
    'azure.servicebus._pyamqp',
    'azure.servicebus.aio._base_handler_async',
    'azure.servicebus._common.utils',
    'azure.servicebus.aio._servicebus_receiver_async',
    'azure.servicebus.aio._servicebus_sender_async',
    'azure.core.pipeline.policies.http_logging_policy',
    'azure.identity.aio._credentials',
    'azure.identity.aio._internal'
]


def configure_logging(level: str = "INFO", log_dir: Optional[str] = None) -> Optional[str]:
    """
    Configure root logging for the command line entry point.

    Args:
        level (str): Root log level name
        log_dir (str, optional): Directory for a per-run log file

    Returns:
        Optional[str]: Path of the log file, None when logging to console only
    """
    # Remove any existing handlers to start fresh
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stderr)]
    log_filename = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_filename = os.path.join(log_dir, f"sb_diver_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log")
        handlers.append(logging.FileHandler(log_filename, mode='w', encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )

    for azure_logger_name in NOISY_AZURE_LOGGERS:
        logging.getLogger(azure_logger_name).setLevel(logging.WARNING)

    return log_filename


def get_logger(name="Default"):
    """Get a logger instance with the specified name."""
    return logging.getLogger(name)

# Unified logging functions that use the Python logging system
def console_info(message, module="Default"):
    """Log an info message with emoji formatting."""
    logger = get_logger(module)
    logger.info(f"ℹ️  [{module}] {message}")

def console_debug(message, module="Default"):
    """Log a debug message with emoji formatting."""
    logger = get_logger(module)
    logger.debug(f"🐛 [{module}] {message}")

def console_warning(message, module="Default"):
    """Log a warning message with emoji formatting."""
    logger = get_logger(module)
    logger.warning(f"⚠️  [{module}] {message}")

def console_error(message, module="Default"):
    """Log an error message with emoji formatting."""
    logger = get_logger(module)
    logger.error(f"❌ [{module}] {message}")
