"""
request — the chainable :class:`Request` builder and its factory functions.

Example::

    body, resp, err = (
        networker.post("https://api.example.com/items", content_type=ContentType.JSON)
        .header("X-Trace", "1")
        .query({"dry_run": "true"})
        .body({"name": "widget"})
        .basic_auth("user", "secret")
        .do()
    )

Every configuration call mutates the request and returns it. Nothing touches
the network until :meth:`Request.do` / :meth:`Request.do_async`.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from .abstraction.body import Fields, Formatter, Raw, Record, as_body
from .abstraction.content import ContentType
from .abstraction.http import URL, HttpMethod
from .abstraction.prepared import PreparedRequest
from .abstraction.response import Result
from .tools.http_utils import (
    basic_auth_header,
    compose_cookie_header,
    encode_body,
    merge_query,
)
from .transport import AsyncClient, Client, default_async_client, default_client

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
]

_BODYLESS = (HttpMethod.GET.value, HttpMethod.DELETE.value)


class Request:
    """Mutable description of one HTTP exchange."""

    def __init__(
        self,
        method: HttpMethod | str,
        url: str = "",
        query: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._method: str = method.value if isinstance(method, HttpMethod) else str(method)
        self._url: str = url
        self._headers: dict[str, str] = {}
        self._cookies: dict[str, str] = {}
        self._query: dict[str, str] = dict(query or {})
        self._ctype: ContentType = ContentType.JSON
        self._fields: dict[str, Any] = {}
        self._raw: str = ""
        self._auth: Optional[tuple[str, str]] = None
        self._formatter: Formatter = str
        self._client: Optional[Client] = None
        self._async_client: Optional[AsyncClient] = None

    def __repr__(self) -> str:
        return f"<Request {self._method} {self._url!r}>"

    # ────── read access ──────
    @property
    def method(self) -> str:
        return self._method

    @property
    def fields(self) -> dict[str, Any]:
        """Body fields collected so far (JSON / FORM bodies)."""
        return dict(self._fields)

    @property
    def raw_body(self) -> str:
        """Raw body text (XML / TEXT bodies)."""
        return self._raw

    # ────── configuration ──────
    def url(self, url: str) -> "Request":
        self._url = url
        return self

    def header(self, key: str, value: str) -> "Request":
        """Set a header, dropping any previous value under the same name in any case."""
        for existing in [k for k in self._headers if k.lower() == key.lower()]:
            del self._headers[existing]
        self._headers[key] = value
        return self

    def query(self, params: Mapping[str, str]) -> "Request":
        """Merge *params* into the query; keys set earlier and absent here stay."""
        self._query.update(params)
        return self

    def cookie(self, key: str, value: str) -> "Request":
        self._cookies[key] = value
        return self

    def basic_auth(self, username: str, password: str) -> "Request":
        self._auth = (username, password)
        return self

    def content_type(self, ctype: ContentType) -> "Request":
        self._ctype = ctype
        return self

    def formatter(self, func: Formatter) -> "Request":
        """How non-text field values are written in FORM bodies and records. ``str`` by default."""
        self._formatter = func
        return self

    def client(self, client: Union[Client, AsyncClient]) -> "Request":
        """Send through *client* instead of the shared default one."""
        if isinstance(client, AsyncClient):
            self._async_client = client
        else:
            self._client = client
        return self

    def body(self, payload: Any) -> "Request":
        """Set the body payload.

        * :class:`Raw` / ``str`` replaces the raw body text;
        * :class:`Record` / dataclass / named tuple / plain object is flattened
          into the fields, names lower-cased and values formatted as text;
        * :class:`Fields` / mapping is merged into the fields.

        ``None`` leaves the body untouched. Other values raise
        :class:`~networker.errors.UnsupportedBodyError`.
        """
        if payload is None:
            return self
        variant = as_body(payload)
        if isinstance(variant, Raw):
            self._raw = variant.text
        elif isinstance(variant, Record):
            self._fields.update(variant.flatten(self._formatter))
        elif isinstance(variant, Fields):
            self._fields.update(variant.values)
        return self

    # ────── execution ──────
    def prepare(self) -> PreparedRequest:
        """Build the exact method, URL, headers and body that :meth:`do` would send."""
        headers = dict(self._headers)

        body: Optional[bytes] = None
        if self._method not in _BODYLESS:
            body = encode_body(self._ctype, self._fields, self._raw, self._formatter)
            _set_header(headers, "Content-Type", self._ctype.mime)

        if self._cookies:
            existing = _pop_header(headers, "Cookie")
            headers["Cookie"] = compose_cookie_header(self._cookies, existing)

        if self._auth is not None:
            _set_header(headers, "Authorization", basic_auth_header(*self._auth))

        return PreparedRequest(
            method=self._method,
            url=URL(full_url=merge_query(self._url, self._query)),
            headers=headers,
            body=body,
            cookies=dict(self._cookies),
        )

    def do(self) -> Result:
        """Perform the exchange synchronously. Returns ``(body, response, error)``."""
        client = self._client or default_client()
        return client.send(self.prepare())

    async def do_async(self) -> Result:
        """Same as :meth:`do`, over curl_cffi's AsyncSession."""
        client = self._async_client or default_async_client()
        return await client.send(self.prepare())


def _pop_header(headers: dict[str, str], name: str) -> str:
    for key in [k for k in headers if k.lower() == name.lower()]:
        return headers.pop(key)
    return ""


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    _pop_header(headers, name)
    headers[name] = value


# ───────────────────────── factories ──────────────────────────


def new(method: HttpMethod | str) -> Request:
    """A request for *method* with no URL yet.

    The method string is sent exactly as given. Only ``"GET"`` and ``"DELETE"``
    (upper case) skip the body.
    """
    return Request(method)


def get(url: str, query: Optional[Mapping[str, str]] = None) -> Request:
    return Request(HttpMethod.GET, url, query)


def head(url: str, query: Optional[Mapping[str, str]] = None) -> Request:
    return Request(HttpMethod.HEAD, url, query)


def delete(url: str, query: Optional[Mapping[str, str]] = None) -> Request:
    return Request(HttpMethod.DELETE, url, query)


def options(url: str, query: Optional[Mapping[str, str]] = None) -> Request:
    return Request(HttpMethod.OPTIONS, url, query)


def _with_body(
    method: HttpMethod,
    url: str,
    query: Optional[Mapping[str, str]],
    content_type: ContentType,
    data: Any,
) -> Request:
    return Request(method, url, query).content_type(content_type).body(data)


def post(
    url: str,
    query: Optional[Mapping[str, str]] = None,
    content_type: ContentType = ContentType.JSON,
    data: Any = None,
) -> Request:
    return _with_body(HttpMethod.POST, url, query, content_type, data)


def put(
    url: str,
    query: Optional[Mapping[str, str]] = None,
    content_type: ContentType = ContentType.JSON,
    data: Any = None,
) -> Request:
    return _with_body(HttpMethod.PUT, url, query, content_type, data)


def patch(
    url: str,
    query: Optional[Mapping[str, str]] = None,
    content_type: ContentType = ContentType.JSON,
    data: Any = None,
) -> Request:
    return _with_body(HttpMethod.PATCH, url, query, content_type, data)
