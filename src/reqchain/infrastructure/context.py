"""Cancellation and deadlines for outgoing requests.

A ``Context`` is the cancellation signal a request carries through the
transport chain. Entering it with ``with`` makes it the active context of the
current thread (or asyncio task), which is where the base transport and the
retry interceptor look it up:

    with Context(timeout=5.0) as ctx:
        session.get("https://example.test/")

Contexts form a tree: a child created with ``parent=`` is cancelled together
with its parent and never outlives the parent's deadline.
"""

from __future__ import annotations

import threading
import time
import weakref
from contextvars import ContextVar, Token
from typing import Optional, Tuple, Type

from reqchain.infrastructure.errors import DeadlineExceeded, RequestCancelled

_current: ContextVar[Optional["Context"]] = ContextVar("reqchain_context", default=None)
# Activation tokens of the current thread or task, innermost last
_tokens: ContextVar[Tuple[Token, ...]] = ContextVar("reqchain_context_tokens", default=())


class Context:
    """Cancellation signal with an optional deadline"""

    def __init__(self, timeout: Optional[float] = None, parent: Optional["Context"] = None):
        """Create a context

        Args:
            timeout: Seconds from now until the deadline (None = no deadline)
            parent: Context whose cancellation and deadline this one inherits

        Raises:
            ValueError: If timeout is negative
        """
        if timeout is not None and timeout < 0:
            raise ValueError("timeout must be non-negative")

        self._done = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[Type[RequestCancelled]] = None
        self._children: "weakref.WeakSet[Context]" = weakref.WeakSet()

        deadline = time.monotonic() + timeout if timeout is not None else None
        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline
        self._deadline = deadline

        if parent is not None:
            parent._adopt(self)

    @property
    def deadline(self) -> Optional[float]:
        """Deadline on the ``time.monotonic()`` clock, or None"""
        return self._deadline

    @property
    def cancelled(self) -> bool:
        """True once cancelled or past the deadline"""
        if self._done.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._finish(DeadlineExceeded)
            return True
        return False

    def remaining(self) -> Optional[float]:
        """Seconds left until the deadline (None = no deadline)"""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def cancel(self) -> None:
        """Cancel this context and all of its children"""
        self._finish(RequestCancelled)

    def error(self) -> Optional[RequestCancelled]:
        """Exception describing why the context ended, or None while active"""
        if not self.cancelled:
            return None
        if issubclass(self._reason, DeadlineExceeded):
            return self._reason("context deadline exceeded")
        return self._reason("context cancelled")

    def raise_if_cancelled(self) -> None:
        """Raise ``RequestCancelled`` (or ``DeadlineExceeded``) if the context ended"""
        error = self.error()
        if error is not None:
            raise error

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``, returning early if the context ends

        Args:
            seconds: Maximum time to block

        Returns:
            True if the context was cancelled (or hit its deadline) by the
            time the call returns
        """
        if seconds <= 0:
            return self.cancelled

        remaining = self.remaining()
        if remaining is not None and remaining <= seconds:
            if not self._done.wait(remaining):
                self._finish(DeadlineExceeded)
            return True

        return self._done.wait(seconds)

    def _adopt(self, child: "Context") -> None:
        with self._lock:
            self._children.add(child)
        if self.cancelled:
            child._finish(self._reason)

    def _finish(self, reason: Type[RequestCancelled]) -> None:
        with self._lock:
            if self._reason is not None:
                return
            self._reason = reason
            children = list(self._children)
            self._children.clear()
        self._done.set()
        for child in children:
            child._finish(reason)

    def __enter__(self) -> "Context":
        _tokens.set(_tokens.get() + (_current.set(self),))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        tokens = _tokens.get()
        _tokens.set(tokens[:-1])
        _current.reset(tokens[-1])

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"<Context {state} remaining={self.remaining()}>"


def current_context() -> Context:
    """Return the active context, or a context that is never cancelled"""
    context = _current.get()
    if context is None:
        return Context()
    return context
