"""Interceptor chain composition"""

from typing import Callable

import requests
from requests.adapters import BaseAdapter

Interceptor = Callable[[BaseAdapter], BaseAdapter]


class ChainAdapter(BaseAdapter):
    """Adapter that sends through an interceptor chain and owns its base transport"""

    def __init__(self, base: BaseAdapter, transport: BaseAdapter):
        super().__init__()
        self.base = base
        self.transport = transport

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        return self.transport.send(request, **kwargs)

    def close(self) -> None:
        self.base.close()


def chain(base: BaseAdapter, *interceptors: Interceptor) -> BaseAdapter:
    """Wrap a base transport in interceptors

    The first interceptor is the outermost: it sees the request first and
    the response last. Put the retry interceptor last so that each attempt
    re-runs only what sits below it.

    Args:
        base: Transport that talks to the network
        *interceptors: Interceptors, outermost first

    Returns:
        ``base`` itself when there are no interceptors, otherwise a
        ``ChainAdapter`` whose ``close()`` closes ``base``
    """
    if not interceptors:
        return base

    transport = base
    for interceptor in reversed(interceptors):
        transport = interceptor(transport)
    return ChainAdapter(base, transport)
