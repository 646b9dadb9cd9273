from datetime import datetime
from typing import Literal, Optional
from dataclasses import dataclass


@dataclass(frozen=True)
class Cookie:
    """
    A cookie received in a ``Set-Cookie`` response header.

    Please, see the MDN Web Docs for the meaning of each attribute:
    https://developer.mozilla.org/en-US/docs/Web/HTTP/Headers/Set-Cookie
    """

    name: str
    """
    The name of the cookie.
    """

    value: str
    """
    The value the server assigned to the cookie.
    """

    path: str = "/"
    """
    The path from which the cookie will be readable.
    """

    domain: str = ""
    """
    The domain from which the cookie will be readable. Defaults to the host of the response.
    """

    expires: int = 0
    """
    The date when the cookie will be deleted, as a Unix timestamp. ``0`` for session cookies.
    """

    max_age: int = 0
    """
    The maximum age of the cookie in seconds.
    """

    same_site: Optional[Literal["Lax", "Strict", "None"]] = None
    """
    The SameSite policy, if the server declared one.
    """

    secure: bool = False
    """
    Whether the cookie is only sent over a secure connection.
    """

    http_only: bool = False
    """
    Whether the cookie is hidden from JavaScript.
    """

    def expires_as_datetime(self) -> datetime:
        """
        The same as the `expires` property but as a datetime object.
        """
        return datetime.fromtimestamp(self.expires)
