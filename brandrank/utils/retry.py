"""Retry helpers for transient data-store failures."""

from __future__ import annotations

import asyncio
import functools
import random
from collections.abc import Awaitable, Callable

import httpx

RETRY_EXCEPTIONS = (OSError, asyncio.TimeoutError, httpx.TransportError)
ATTEMPTS = 3


def retry_async(func: Callable[..., Awaitable]):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        delay = 0.25
        for attempt in range(ATTEMPTS):
            try:
                return await func(*args, **kwargs)
            except RETRY_EXCEPTIONS:
                if attempt == ATTEMPTS - 1:
                    raise
                await asyncio.sleep(delay + random.random() * delay)
                delay *= 2
    return wrapper
