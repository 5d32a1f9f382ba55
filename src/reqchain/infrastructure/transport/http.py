"""Base transport: ``HTTPAdapter`` bound to the active request context"""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from reqchain.infrastructure.context import current_context
from reqchain.infrastructure.errors import DeadlineExceeded

logger = logging.getLogger(__name__)


def _clamp_timeout(timeout: Any, remaining: float) -> Any:
    """Cap a requests ``timeout`` value at ``remaining`` seconds"""
    if timeout is None:
        return remaining
    if isinstance(timeout, tuple):
        return tuple(remaining if part is None else min(part, remaining) for part in timeout)
    if isinstance(timeout, (int, float)):
        return min(timeout, remaining)
    return timeout


class HTTPTransport(HTTPAdapter):
    """Connection-pooling transport that honours the active ``Context``.

    urllib3-level retries are disabled: retrying belongs to the retry
    interceptor, which sits above this transport.
    """

    def __init__(
        self,
        pool_connections: int = 10,
        pool_maxsize: int = 10,
        pool_block: bool = False,
    ):
        """Initialize transport

        Args:
            pool_connections: Number of per-host connection pools to cache
            pool_maxsize: Maximum connections kept per pool
            pool_block: Whether to block when a pool has no free connection
        """
        super().__init__(
            pool_connections=pool_connections,
            pool_maxsize=pool_maxsize,
            max_retries=0,
            pool_block=pool_block,
        )

    def send(
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: Any = None,
        verify: Any = True,
        cert: Any = None,
        proxies: Any = None,
    ) -> requests.Response:
        """Send a request, failing fast if its context has already ended

        Raises:
            RequestCancelled: If the active context was cancelled
            DeadlineExceeded: If the active context's deadline passed
        """
        context = current_context()
        context.raise_if_cancelled()

        remaining = context.remaining()
        if remaining is not None:
            if remaining <= 0:
                # Deadline passed after the cancellation check
                raise context.error() or DeadlineExceeded("context deadline exceeded")
            timeout = _clamp_timeout(timeout, remaining)

        logger.debug(f"Sending {request.method} {request.url} (timeout={timeout})")
        return super().send(
            request, stream=stream, timeout=timeout, verify=verify, cert=cert, proxies=proxies
        )
