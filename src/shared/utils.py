import secrets
import sys
import time
from datetime import datetime, timezone

from loguru import logger as loguru_logger

from src.config.settings_env import settings


def initialize_logger(dev_mode: bool | None = None):
    """Initialize the logger based on DEV_MODE setting.

    Called once at application startup; request handling code only binds
    child loggers from the result.
    """
    if dev_mode is None:
        dev_mode = settings.DEV_MODE

    loguru_logger.remove()

    if dev_mode:
        loguru_logger.add(sys.stderr, level="TRACE")
    else:
        loguru_logger.add(sys.stderr, level="INFO")

    return loguru_logger


def utcnow() -> datetime:
    """Current UTC time truncated to whole milliseconds."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def generate_receipt_number(prefix: str) -> str:
    # <prefix>-<epoch ms>-<random hex>; the tail separates receipts minted
    # within the same millisecond.
    epoch_ms = time.time_ns() // 1_000_000
    return f"{prefix}-{epoch_ms}-{secrets.token_hex(4).upper()}"
