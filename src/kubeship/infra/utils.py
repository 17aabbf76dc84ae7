"""Bridging the async controllers into synchronous callers."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar


def _loop_is_running() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


T = TypeVar("T")


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Block until ``coro`` finishes and return its result.

    The CLI commands use this to drive ``KubeShip``. When the caller is
    already inside an event loop (a notebook, a pytest-asyncio test) the
    coroutine gets its own loop on a worker thread, since a running loop
    cannot be re-entered.
    """
    if not _loop_is_running():
        return asyncio.run(coro)
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="kubeship-sync") as executor:
        return executor.submit(asyncio.run, coro).result()
