"""Request body snapshots and response body draining.

A request may be sent several times when retried, so its body must be
re-readable. ``snapshot_body`` turns whatever ``PreparedRequest.body`` holds
into a value that can be sent again byte for byte.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

import requests
from requests.exceptions import RequestException

from reqchain.infrastructure.errors import BodySnapshotError

logger = logging.getLogger(__name__)

Body = Union[bytes, str]


def snapshot_body(body: Any) -> Optional[Body]:
    """Take an independent, re-readable copy of a request body

    Args:
        body: ``PreparedRequest.body`` (None, bytes, str, file-like or iterable)

    Returns:
        The body as bytes or str, or None if there is no body

    Raises:
        BodySnapshotError: If the body cannot be read
    """
    if body is None or isinstance(body, (bytes, str)):
        return body
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)

    try:
        if hasattr(body, "read"):
            data = body.read()
            return data.encode("utf-8") if isinstance(data, str) else bytes(data)
        chunks = [
            chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)
            for chunk in body
        ]
    except Exception as e:
        raise BodySnapshotError(f"Failed to snapshot request body: {e}") from e
    return b"".join(chunks)


def drain_body(response: Optional[requests.Response]) -> None:
    """Read the rest of a discarded response and close it

    Releases the underlying connection back to the pool. Read failures are
    logged and ignored; the response is closed either way.
    """
    if response is None:
        return
    try:
        _ = response.content
    except (RequestException, OSError, RuntimeError) as e:
        # RuntimeError: body already consumed by a streaming reader
        logger.debug(f"Failed to drain response body from {response.url}: {e}")
    finally:
        response.close()
