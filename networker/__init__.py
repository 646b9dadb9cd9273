from .abstraction.body import Fields, Raw, Record
from .abstraction.content import ContentType
from .abstraction.cookies import Cookie
from .abstraction.http import DELETE, GET, HEAD, OPTIONS, PATCH, POST, PUT, URL, HttpMethod
from .abstraction.prepared import PreparedRequest
from .abstraction.response import Response, Result
from .errors import BodyReadError, NetworkerError, TransportError, UnsupportedBodyError
from .request import Request, delete, get, head, new, options, patch, post, put
from .transport import (
    AsyncClient,
    Client,
    ClientConfig,
    aclose_default_client,
    close_default_client,
)

__all__ = [
    "Request",
    "new",
    "get",
    "head",
    "post",
    "put",
    "delete",
    "patch",
    "options",
    "ContentType",
    "HttpMethod",
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "OPTIONS",
    "URL",
    "Raw",
    "Record",
    "Fields",
    "Cookie",
    "PreparedRequest",
    "Response",
    "Result",
    "Client",
    "AsyncClient",
    "ClientConfig",
    "close_default_client",
    "aclose_default_client",
    "NetworkerError",
    "TransportError",
    "BodyReadError",
    "UnsupportedBodyError",
]

__version__ = "0.1.0"
