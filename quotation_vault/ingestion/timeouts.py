from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from quotation_vault.ingestion.errors import ExtractionTimeoutError

T = TypeVar("T")

DEFAULT_TIMEOUT_S = 10.0


async def with_timeout(aw: Awaitable[T], timeout_s: float = DEFAULT_TIMEOUT_S) -> T:
    """Race `aw` against a deadline.

    On expiry raises ExtractionTimeoutError. Work that was pushed to a
    thread (see `run_blocking`) cannot be interrupted: the thread runs to
    completion and its result is dropped.
    """
    try:
        return await asyncio.wait_for(aw, timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise ExtractionTimeoutError(timeout_s) from e


async def run_blocking(fn: Callable[..., T], /, *args: object, timeout_s: float = DEFAULT_TIMEOUT_S, **kwargs: object) -> T:
    """Run a blocking engine call in a worker thread, bounded by `timeout_s`."""
    return await with_timeout(asyncio.to_thread(fn, *args, **kwargs), timeout_s)
