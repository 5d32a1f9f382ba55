"""Function-to-adapter shim"""

from typing import Callable

import requests
from requests.adapters import BaseAdapter

SendFunc = Callable[..., requests.Response]


class RoundTripper(BaseAdapter):
    """Transport adapter that forwards ``send`` to a plain function.

    Lets interceptors be written as functions with the signature of
    ``BaseAdapter.send`` while still plugging into anything that expects an
    adapter (``Session.mount``, another interceptor).
    """

    def __init__(self, func: SendFunc):
        super().__init__()
        self._func = func

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        return self._func(request, **kwargs)

    def close(self) -> None:
        pass
