"""
HTTP client construction for the DA node connection.

Centralizes httpx client creation with timeouts, a small connection pool
and a consistent User-Agent. Each verification run owns its client and
closes it when the run ends; there is no process-wide shared client.
"""

from __future__ import annotations

import os
from typing import Optional

import httpx

from blobstream_toolkit.shared.constants import NetworkConstants

USER_AGENT = os.getenv("BS_HTTP_UA", NetworkConstants.USER_AGENT)


def _build_limits() -> httpx.Limits:
    return httpx.Limits(max_keepalive_connections=2, max_connections=4)


def _build_timeout(timeout: float) -> httpx.Timeout:
    connect = min(timeout, NetworkConstants.DEFAULT_CONNECT_TIMEOUT)
    return httpx.Timeout(timeout, connect=connect)


def _default_headers() -> dict:
    return {"User-Agent": USER_AGENT, "Content-Type": "application/json"}


def normalize_rpc_url(url: str) -> str:
    """Rewrite Tendermint-style ``tcp://`` endpoints to plain HTTP."""
    if url.startswith("tcp://"):
        url = "http://" + url[len("tcp://") :]
    return url.rstrip("/")


def create_client(
    base_url: str,
    timeout: float = NetworkConstants.DEFAULT_HTTP_TIMEOUT,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Create a synchronous client bound to ``base_url``.

    ``transport`` lets tests plug in an ``httpx.MockTransport``.
    """
    return httpx.Client(
        base_url=normalize_rpc_url(base_url),
        timeout=_build_timeout(timeout),
        limits=_build_limits(),
        headers=_default_headers(),
        transport=transport,
    )
