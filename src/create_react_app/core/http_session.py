"""Configured HTTP session for archive downloads."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from create_react_app.constants import DEFAULT_TIMEOUT_SECONDS
from create_react_app.domain.types import Settings

# Both targets may be archives on the same host
MAX_CONNECTIONS_PER_HOST = 2


@asynccontextmanager
async def create_http_session(
    settings: Settings | None = None,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Create an HTTP session using the configured network timeout.

    Args:
        settings: Loaded settings; defaults apply when omitted

    Yields:
        Configured aiohttp.ClientSession

    """
    timeout_seconds = DEFAULT_TIMEOUT_SECONDS
    if settings is not None:
        timeout_seconds = int(settings["network"]["timeout_seconds"])

    timeout = aiohttp.ClientTimeout(
        total=timeout_seconds * 60,
        sock_read=timeout_seconds * 3,
        sock_connect=timeout_seconds,
    )
    connector = aiohttp.TCPConnector(limit_per_host=MAX_CONNECTIONS_PER_HOST)

    async with aiohttp.ClientSession(
        timeout=timeout,
        connector=connector,
    ) as session:
        yield session
