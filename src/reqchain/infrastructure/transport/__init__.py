"""Transport adapters and interceptor composition"""

from reqchain.infrastructure.transport.body import drain_body, snapshot_body
from reqchain.infrastructure.transport.chain import ChainAdapter, Interceptor, chain
from reqchain.infrastructure.transport.http import HTTPTransport
from reqchain.infrastructure.transport.round_tripper import RoundTripper

__all__ = [
    "ChainAdapter",
    "HTTPTransport",
    "Interceptor",
    "RoundTripper",
    "chain",
    "drain_body",
    "snapshot_body",
]
