from dataclasses import dataclass
from typing import Optional

from .http import URL


@dataclass(frozen=True)
class PreparedRequest:
    """Everything that is put on the wire for one exchange."""

    method: str
    """The method used in the request."""

    url: URL
    """The URL of the request, query string included."""

    headers: dict[str, str]
    """The headers of the request, one value per name."""

    body: Optional[bytes]
    """The encoded body, ``None`` for methods that never send one."""

    cookies: dict[str, str]
    """The cookies passed in the request."""
