from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional

from ..errors import NetworkerError
from ..tools.http_utils import guess_encoding
from .cookies import Cookie
from .http import URL
from .prepared import PreparedRequest


@dataclass(frozen=True)
class Response:
    """Represents the metadata of a response. The body travels next to it in :class:`Result`."""

    request: PreparedRequest
    """The request that was made."""

    url: URL
    """The URL of the response. Due to redirects, it can differ from `request.url`."""

    status_code: int
    """The status code of the response."""

    reason: str
    """The reason phrase sent with the status code."""

    headers: dict[str, str]
    """The headers of the response, names lower-cased."""

    cookies: list[Cookie]
    """The cookies set by the response."""

    duration: float
    """Seconds from dispatch until the status line and headers were received."""

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def encoding(self) -> str:
        """Charset declared in the Content-Type header, ``utf-8`` otherwise."""
        return guess_encoding(self.headers)


class Result(NamedTuple):
    """Outcome of ``Request.do()``.

    * success: ``body`` and ``response`` set, ``error`` is ``None``;
    * transport failure: ``body`` is ``None``, ``response`` usually ``None``;
    * body read failure: ``body`` is ``None``, ``response`` is set.
    """

    body: Optional[bytes]
    response: Optional[Response]
    error: Optional[NetworkerError]

    def raise_for_error(self) -> "Result":
        if self.error is not None:
            raise self.error
        return self

    def text(self, errors: str = "replace") -> str:
        if self.body is None:
            return ""
        charset = self.response.encoding if self.response is not None else "utf-8"
        return self.body.decode(charset, errors=errors)
