"""Retry interceptor built on tenacity.

Wraps a transport so that transport errors and retryable status codes are
retried up to ``MAX_RETRIES`` times. Every attempt sends the same body bytes,
discarded responses are drained so their connections go back to the pool,
and backoff waits end early when the request's context is cancelled.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Tuple

import requests
from requests.adapters import BaseAdapter
from requests.exceptions import RequestException
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_chain,
    wait_fixed,
    wait_none,
)

from reqchain.infrastructure.context import Context, current_context
from reqchain.infrastructure.transport.body import drain_body, snapshot_body
from reqchain.infrastructure.transport.chain import Interceptor
from reqchain.infrastructure.transport.round_tripper import RoundTripper

logger = logging.getLogger(__name__)

# Fixed policy: 1 attempt + 3 retries
MAX_RETRIES = 3

DEFAULT_RETRY_STATUS_CODES: Tuple[int, ...] = (408, 425, 429, 502, 503, 504)


def backoff_delay(retry_number: int) -> float:
    """Backoff in seconds for the n-th retry: 1, 2, 4, ..."""
    return float(2 ** (retry_number - 1))


def should_retry(
    response: Optional[requests.Response],
    error: Optional[BaseException],
    status_codes: Iterable[int],
) -> bool:
    """Decide whether an attempt's outcome should be retried

    Args:
        response: Response of the attempt (None if it raised)
        error: Exception raised by the attempt (None if it returned)
        status_codes: Retryable status codes

    Returns:
        True for any transport error (``RequestException``) or a response
        whose status code is retryable
    """
    if error is not None:
        return isinstance(error, RequestException)
    return response is not None and response.status_code in status_codes


def _sleep(context: Context, seconds: float) -> None:
    if context.wait(seconds):
        logger.debug("Backoff interrupted: request context ended")


def _before_sleep(retry_state: RetryCallState) -> None:
    """Drain the discarded response and log the upcoming retry"""
    outcome = retry_state.outcome
    if outcome is None:
        return
    if outcome.failed:
        exception = outcome.exception()
        cause = f"{type(exception).__name__}: {exception}"
    else:
        response = outcome.result()
        cause = f"HTTP {response.status_code}"
        drain_body(response)
    logger.warning(
        f"Request failed (attempt {retry_state.attempt_number}/{MAX_RETRIES + 1}): {cause}. "
        f"Retrying in {retry_state.next_action.sleep:.1f}s..."
    )


def _last_outcome(retry_state: RetryCallState) -> requests.Response:
    # Returns the last response or re-raises the last transport error
    return retry_state.outcome.result()


def _validate_status_codes(status_codes: Tuple[int, ...]) -> None:
    for code in status_codes:
        if isinstance(code, bool) or not isinstance(code, int) or not 100 <= code <= 599:
            raise ValueError(f"Invalid HTTP status code: {code!r}")


def retry(*status_codes: int) -> Interceptor:
    """Create a retry interceptor

    Args:
        *status_codes: Status codes to retry on (default: DEFAULT_RETRY_STATUS_CODES)

    Returns:
        Interceptor wrapping a transport with retries. Place it last in a
        chain so nothing else runs more than once per attempt.

    Raises:
        ValueError: If a status code is not a valid HTTP status
    """
    codes = tuple(status_codes) if status_codes else DEFAULT_RETRY_STATUS_CODES
    _validate_status_codes(codes)

    # No wait before the first retry, then backoff_delay(1), backoff_delay(2)
    wait = wait_chain(
        wait_none(),
        *[wait_fixed(backoff_delay(n)) for n in range(1, MAX_RETRIES)],
    )
    retrying = Retrying(
        stop=stop_after_attempt(MAX_RETRIES + 1),
        wait=wait,
        retry=(
            retry_if_exception(lambda e: should_retry(None, e, codes))
            | retry_if_result(lambda r: should_retry(r, None, codes))
        ),
        before_sleep=_before_sleep,
        retry_error_callback=_last_outcome,
    )

    def interceptor(transport: BaseAdapter) -> BaseAdapter:
        def round_trip(request: requests.PreparedRequest, **kwargs) -> requests.Response:
            # Raises BodySnapshotError before any attempt is made
            body = snapshot_body(request.body)
            context = current_context()

            def attempt() -> requests.Response:
                if body is not None:
                    request.body = body
                return transport.send(request, **kwargs)

            per_request = retrying.copy(sleep=lambda seconds: _sleep(context, seconds))
            return per_request(attempt)

        return RoundTripper(round_trip)

    return interceptor
