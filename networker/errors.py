from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .abstraction.response import Response


class NetworkerError(Exception):
    """Base class for everything this package reports."""


class TransportError(NetworkerError):
    """The exchange could not be performed (bad URL, DNS, refused connection...).

    The curl_cffi exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, response: Optional["Response"] = None) -> None:
        super().__init__(message)
        self.response = response


class BodyReadError(NetworkerError):
    """The server answered but draining the response body failed."""

    def __init__(self, message: str, response: "Response") -> None:
        super().__init__(message)
        self.response = response


class UnsupportedBodyError(NetworkerError, TypeError):
    """The payload given to ``Request.body()`` has no body variant."""
