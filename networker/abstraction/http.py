from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

GET = "GET"
HEAD = "HEAD"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"
PATCH = "PATCH"
OPTIONS = "OPTIONS"


class HttpMethod(str, Enum):
    """HTTP methods the builder has shortcuts for."""

    GET = GET
    HEAD = HEAD
    POST = POST
    PUT = PUT
    DELETE = DELETE
    PATCH = PATCH
    OPTIONS = OPTIONS


@dataclass(frozen=True)
class URL:
    """A URL split into the parts the rest of the package looks at."""

    full_url: str
    """The full URL as it was sent or received."""

    scheme: str = field(init=False)
    domain: str = field(init=False)
    path: str = field(init=False)
    query: str = field(init=False)

    def __post_init__(self) -> None:
        parts = urlsplit(self.full_url)
        object.__setattr__(self, "scheme", parts.scheme)
        object.__setattr__(self, "domain", (parts.hostname or "").lower())
        object.__setattr__(self, "path", parts.path or "/")
        object.__setattr__(self, "query", parts.query)

    def __str__(self) -> str:
        return self.full_url
