"""Bridges between the async pipeline and synchronous callers (Flask, Click).

Flask routes and CLI commands are synchronous; the pipeline is written with
asyncio. Each call gets its own short-lived event loop.
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from typing import Any


def run_async(coro: Any) -> Any:
    """Run an async coroutine in a new event loop.

    This is useful for calling async functions from synchronous Flask routes.
    Creates a new event loop, runs the coroutine, and properly cleans up.

    Args:
        coro: An awaitable coroutine to execute

    Returns:
        The result of the coroutine
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def iterate_async(agen: AsyncIterator[Any]) -> Iterator[Any]:
    """Drive an async generator from synchronous code, one item at a time.

    Items are handed to the caller as soon as they are produced, so a WSGI
    response can flush each one. If the caller stops early (for example the
    client disconnected and the response iterator was closed), the async
    generator is closed with ``aclose()`` on the same loop.
    """
    loop = asyncio.new_event_loop()
    try:
        while True:
            try:
                item = loop.run_until_complete(agen.__anext__())
            except StopAsyncIteration:
                return
            yield item
    finally:
        try:
            loop.run_until_complete(agen.aclose())
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            loop.close()
