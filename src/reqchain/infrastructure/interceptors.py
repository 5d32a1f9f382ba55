"""General-purpose interceptors"""

from __future__ import annotations

import logging
import time
from typing import Optional

import requests
from requests.adapters import BaseAdapter
from requests.exceptions import RequestException

from reqchain.infrastructure.transport.chain import Interceptor
from reqchain.infrastructure.transport.round_tripper import RoundTripper


def log_requests(log: Optional[logging.Logger] = None) -> Interceptor:
    """Create an interceptor that logs each request and its outcome

    Args:
        log: Logger to write to (default: this module's logger)

    Returns:
        Interceptor; place it first in a chain to log once per logical request
    """
    log = log or logging.getLogger(__name__)

    def interceptor(transport: BaseAdapter) -> BaseAdapter:
        def round_trip(request: requests.PreparedRequest, **kwargs) -> requests.Response:
            log.debug(f"HTTP request: {request.method} {request.url}")
            start = time.perf_counter()
            try:
                response = transport.send(request, **kwargs)
            except RequestException as e:
                elapsed = time.perf_counter() - start
                log.warning(
                    f"HTTP request failed: {request.method} {request.url} | "
                    f"{type(e).__name__}: {e} | elapsed: {elapsed:.3f}s"
                )
                raise
            elapsed = time.perf_counter() - start
            log.debug(
                f"HTTP response: {response.status_code} {request.method} {request.url} | "
                f"elapsed: {elapsed:.3f}s"
            )
            return response

        return RoundTripper(round_trip)

    return interceptor
