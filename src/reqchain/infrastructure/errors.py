"""Errors raised by the transport layer.

All of them derive from ``requests.RequestException`` so callers handle them
the same way they handle any other ``requests`` failure.
"""

from requests.exceptions import RequestException


class RequestCancelled(RequestException):
    """The request's context was cancelled before or during the call."""

    pass


class DeadlineExceeded(RequestCancelled):
    """The request's context deadline passed."""

    pass


class BodySnapshotError(RequestException):
    """A replayable copy of the request body could not be taken."""

    pass
