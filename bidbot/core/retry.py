"""Retry logic for idempotent outbound calls."""

import logging

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from bidbot.core.logging import get_logger

logger = get_logger("core.retry")

# Decorator for read-only portal calls
# - Max 3 attempts
# - Exponential backoff: 1s, 2s, 4s... (max 10s)
# - Retry only on connection errors and timeouts
transport_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(httpx.TransportError),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
