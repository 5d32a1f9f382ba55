"""HTTP client wiring: session, base transport and interceptor chain.

We keep session construction centralized so every caller gets the same
transport stack: the context-aware ``HTTPTransport`` at the bottom, caller
interceptors above it, and the retry interceptor innermost.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import requests

from reqchain.domain.config import ClientConfig, RetryConfig
from reqchain.infrastructure.context import Context, current_context
from reqchain.infrastructure.retry import retry
from reqchain.infrastructure.transport import HTTPTransport, Interceptor, chain

logger = logging.getLogger(__name__)


def create_session(
    client_config: Optional[ClientConfig] = None,
    retry_config: Optional[RetryConfig] = None,
    interceptors: Sequence[Interceptor] = (),
) -> requests.Session:
    """Create a session whose http(s) adapter runs the interceptor chain

    Args:
        client_config: Pool settings (defaults if None)
        retry_config: Retry settings (defaults if None)
        interceptors: Extra interceptors, outermost first

    Returns:
        Configured requests session
    """
    client_config = client_config or ClientConfig()
    retry_config = retry_config or RetryConfig()

    base = HTTPTransport(
        pool_connections=client_config.pool_connections,
        pool_maxsize=client_config.pool_maxsize,
        pool_block=client_config.pool_block,
    )

    stack = list(interceptors)
    if retry_config.enabled:
        stack.append(retry(*(retry_config.status_codes or ())))

    adapter = chain(base, *stack)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    logger.debug(f"Session created with {len(stack)} interceptor(s), retry={retry_config.enabled}")
    return session


class HttpClient:
    """HTTP client with interceptors, retries and per-request deadlines

    Usage:
        with HttpClient(retry_config=RetryConfig(status_codes=[503])) as client:
            response = client.get("https://api.example.test/users", timeout=5)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        retry_config: Optional[RetryConfig] = None,
        interceptors: Sequence[Interceptor] = (),
        session: Optional[requests.Session] = None,
    ):
        """Initialize HTTP client

        Args:
            config: Client configuration (defaults if None)
            retry_config: Retry configuration (defaults if None)
            interceptors: Extra interceptors, outermost first
            session: Prebuilt session (skips session construction)
        """
        self.config = config or ClientConfig()
        self.session = session or create_session(self.config, retry_config, interceptors)

    def request(
        self,
        method: str,
        url: str,
        *,
        ctx: Optional[Context] = None,
        timeout: Optional[float] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """Send a request

        The timeout bounds the whole call, retries and backoff included; it
        is also passed to each attempt as the socket timeout.

        Args:
            method: HTTP method
            url: Request URL
            ctx: Parent context (default: the active context)
            timeout: Seconds for the whole call (default: config timeout)
            **kwargs: Passed through to ``requests.Session.request``

        Returns:
            The final response

        Raises:
            requests.RequestException: If the final attempt failed
        """
        timeout = timeout if timeout is not None else self.config.timeout
        parent = ctx if ctx is not None else current_context()
        with Context(timeout=timeout, parent=parent):
            return self.session.request(method, url, timeout=timeout, **kwargs)

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("GET", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("HEAD", url, **kwargs)

    def options(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("OPTIONS", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("DELETE", url, **kwargs)

    def close(self) -> None:
        """Close the session and its connection pools"""
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
