"""
HTTP transport helpers for gql_fetch.

The exchange runner delegates the HTTP call to an ``aiohttp.ClientSession``.
Callers may supply their own session; otherwise a shared default session is
created lazily, one per running event loop.
"""

from __future__ import annotations

import asyncio
import logging
import weakref
from typing import Optional

import aiohttp
from pydantic import BaseModel, ConfigDict, Field

from . import __version__

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"gql-fetch/{__version__}"


class TransportConfig(BaseModel):
    """Configuration for sessions created by :func:`create_session`."""

    model_config = ConfigDict(extra="forbid")

    # Timeout settings
    total_timeout: Optional[float] = Field(
        default=None, gt=0, description="Total request timeout in seconds"
    )
    connect_timeout: Optional[float] = Field(
        default=10.0, gt=0, description="Connection timeout in seconds"
    )
    sock_read_timeout: Optional[float] = Field(
        default=None, gt=0, description="Socket read timeout in seconds"
    )

    # Connection settings
    max_connections: int = Field(default=100, ge=0, description="Maximum connections")
    max_connections_per_host: int = Field(
        default=0, ge=0, description="Max connections per host (0 = unlimited)"
    )
    keepalive_timeout: float = Field(default=15.0, gt=0, description="Keep-alive timeout")

    # Session settings
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")
    trust_env: bool = Field(default=False, description="Read proxy settings from environment")


def create_session(config: Optional[TransportConfig] = None) -> aiohttp.ClientSession:
    """
    Create an aiohttp session configured from ``config``.

    Must be called with a running event loop. The caller owns the session and
    is responsible for closing it.

    Args:
        config: Transport configuration (defaults if None)

    Returns:
        New ``aiohttp.ClientSession``
    """
    config = config or TransportConfig()

    connector = aiohttp.TCPConnector(
        limit=config.max_connections,
        limit_per_host=config.max_connections_per_host,
        keepalive_timeout=config.keepalive_timeout,
    )
    timeout = aiohttp.ClientTimeout(
        total=config.total_timeout,
        connect=config.connect_timeout,
        sock_read=config.sock_read_timeout,
    )

    session = aiohttp.ClientSession(
        connector=connector,
        timeout=timeout,
        headers={"User-Agent": config.user_agent},
        trust_env=config.trust_env,
        raise_for_status=False,  # status codes are handled by the runner
    )
    logger.debug("HTTP session created (limit=%d)", config.max_connections)
    return session


_default_sessions: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, aiohttp.ClientSession]" = (
    weakref.WeakKeyDictionary()
)


def default_session() -> aiohttp.ClientSession:
    """
    Return the shared default session for the running event loop.

    The session is created on first use and re-created if it was closed.
    Clients constructed without a session use it.

    Raises:
        RuntimeError: If called without a running event loop
    """
    loop = asyncio.get_running_loop()
    session = _default_sessions.get(loop)
    if session is None or session.closed:
        session = create_session()
        _default_sessions[loop] = session
    return session


async def close_default_session() -> None:
    """Close the running event loop's default session, if one exists."""
    loop = asyncio.get_running_loop()
    session = _default_sessions.pop(loop, None)
    if session is not None and not session.closed:
        await session.close()
        logger.debug("Default HTTP session closed")
