"""
transport — the curl_cffi sessions every :class:`networker.Request` is sent through.

* :class:`Client`: wraps ``curl_cffi.requests.Session``;
* :class:`AsyncClient`: wraps ``curl_cffi.requests.AsyncSession``;
* :func:`default_client` / :func:`default_async_client`: lazily created
  shared instances used when a request was not given its own client.

Responses are always requested with ``stream=True`` so that reading the body
is a separate step: a failure there is reported as :class:`BodyReadError`
together with the already known status and headers. The stream is closed on
every path.

Cookies set by responses are parsed into :class:`Response` but never kept in
the session jar: a request only carries the cookies it was configured with.

Timeouts, redirects, TLS and pooling are left at curl_cffi's defaults.
"""

from __future__ import annotations

import asyncio
import logging
import os
import threading
import weakref
from dataclasses import dataclass, field
from time import perf_counter
from types import TracebackType
from typing import Any, Optional

from curl_cffi import CurlError
from curl_cffi import requests as cffi_requests

from .abstraction.http import URL
from .abstraction.prepared import PreparedRequest
from .abstraction.response import Response, Result
from .errors import BodyReadError, TransportError
from .tools.http_utils import collect_set_cookie_headers, parse_set_cookie

__all__ = [
    "ClientConfig",
    "Client",
    "AsyncClient",
    "default_client",
    "default_async_client",
    "close_default_client",
    "aclose_default_client",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ClientConfig:
    """
    Settings applied to the underlying curl_cffi session.

    Example::

        cfg = ClientConfig(impersonate="chrome", proxy="http://127.0.0.1:3128")
        networker.get(url).client(Client(cfg)).do()
    """

    impersonate: Optional[str] = None
    """curl_cffi browser profile (``"chrome"``, ``"safari17_0"``...), ``None`` for plain libcurl."""

    proxy: Optional[str] = None
    """Proxy URL used for every request of the session."""

    headers: dict[str, str] = field(default_factory=dict)
    """Default headers; the request's own headers take precedence."""

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Read ``NETWORKER_IMPERSONATE`` and ``NETWORKER_PROXY``."""
        return cls(
            impersonate=os.getenv("NETWORKER_IMPERSONATE") or None,
            proxy=os.getenv("NETWORKER_PROXY") or None,
        )

    def session_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.impersonate:
            kwargs["impersonate"] = self.impersonate
        if self.proxy:
            kwargs["proxy"] = self.proxy
        if self.headers:
            kwargs["headers"] = dict(self.headers)
        return kwargs


# ───────────────────────── helpers ──────────────────────────


def _to_response(prepared: PreparedRequest, r: Any, duration: float) -> Response:
    url = URL(full_url=str(r.url or prepared.url))
    pairs = list(r.headers.multi_items())
    resp_cookies = parse_set_cookie(collect_set_cookie_headers(pairs), url.domain)
    return Response(
        request=prepared,
        url=url,
        status_code=r.status_code,
        reason=r.reason or "",
        headers={k.lower(): v for k, v in r.headers.items()},
        cookies=resp_cookies,
        duration=duration,
    )


def _transport_failure(
    prepared: PreparedRequest, exc: CurlError, duration: float
) -> Result:
    logger.warning("%s %s failed: %s", prepared.method, prepared.url, exc)
    partial = getattr(exc, "response", None)
    response = _to_response(prepared, partial, duration) if partial is not None else None
    error = TransportError(str(exc), response)
    error.__cause__ = exc
    return Result(None, response, error)


def _read_failure(response: Response, exc: CurlError) -> Result:
    logger.warning(
        "%s %s: reading body failed after status %s: %s",
        response.request.method,
        response.request.url,
        response.status_code,
        exc,
    )
    error = BodyReadError(str(exc), response)
    error.__cause__ = exc
    return Result(None, response, error)


# ───────────────────────── sync ──────────────────────────


class Client:
    """curl_cffi.Session wrapper performing one exchange per :meth:`send`."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        session: Optional[cffi_requests.Session] = None,
    ) -> None:
        self.config: ClientConfig = config or ClientConfig()
        self._session: Optional[cffi_requests.Session] = session

    def _ensure_session(self) -> cffi_requests.Session:
        if self._session is None:
            self._session = cffi_requests.Session(**self.config.session_kwargs())
        return self._session

    def send(self, prepared: PreparedRequest) -> Result:
        session = self._ensure_session()
        logger.debug("-> %s %s", prepared.method, prepared.url)

        t0 = perf_counter()
        try:
            r = session.request(
                prepared.method,
                prepared.url.full_url,
                headers=prepared.headers,
                data=prepared.body,
                stream=True,
                discard_cookies=True,
            )
        except CurlError as exc:
            return _transport_failure(prepared, exc, perf_counter() - t0)

        try:
            response = _to_response(prepared, r, perf_counter() - t0)
            try:
                body = b"".join(r.iter_content())
            except CurlError as exc:
                return _read_failure(response, exc)
        finally:
            r.close()

        logger.debug(
            "<- %s %s %s (%d bytes, %.3fs)",
            prepared.method,
            prepared.url,
            response.status_code,
            len(body),
            response.duration,
        )
        return Result(body, response, None)

    def close(self) -> None:
        if self._session is not None:
            try:
                self._session.close()
            finally:
                self._session = None

    def __enter__(self) -> "Client":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.close()


# ───────────────────────── async ──────────────────────────


class AsyncClient:
    """curl_cffi.AsyncSession wrapper, the async twin of :class:`Client`."""

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        session: Optional[cffi_requests.AsyncSession] = None,
    ) -> None:
        self.config: ClientConfig = config or ClientConfig()
        self._session: Optional[cffi_requests.AsyncSession] = session

    def _ensure_session(self) -> cffi_requests.AsyncSession:
        if self._session is None:
            self._session = cffi_requests.AsyncSession(**self.config.session_kwargs())
        return self._session

    async def send(self, prepared: PreparedRequest) -> Result:
        session = self._ensure_session()
        logger.debug("-> %s %s", prepared.method, prepared.url)

        t0 = perf_counter()
        try:
            r = await session.request(
                prepared.method,
                prepared.url.full_url,
                headers=prepared.headers,
                data=prepared.body,
                stream=True,
                discard_cookies=True,
            )
        except CurlError as exc:
            return _transport_failure(prepared, exc, perf_counter() - t0)

        try:
            response = _to_response(prepared, r, perf_counter() - t0)
            try:
                body = b"".join([chunk async for chunk in r.aiter_content()])
            except CurlError as exc:
                return _read_failure(response, exc)
        finally:
            await r.aclose()

        logger.debug(
            "<- %s %s %s (%d bytes, %.3fs)",
            prepared.method,
            prepared.url,
            response.status_code,
            len(body),
            response.duration,
        )
        return Result(body, response, None)

    async def close(self) -> None:
        if self._session is not None:
            try:
                await self._session.close()
            finally:
                self._session = None

    async def __aenter__(self) -> "AsyncClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()


# ───────────────────────── shared instances ──────────────────────────

_default: Optional[Client] = None
_default_lock = threading.Lock()

# an AsyncSession is bound to the loop it first ran on
_default_async: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, AsyncClient]" = (
    weakref.WeakKeyDictionary()
)


def default_client() -> Client:
    """The process-wide client used by ``Request.do()``."""
    global _default
    with _default_lock:
        if _default is None:
            _default = Client(ClientConfig.from_env())
        return _default


def default_async_client() -> AsyncClient:
    """The client used by ``Request.do_async()`` on the running event loop."""
    loop = asyncio.get_running_loop()
    client = _default_async.get(loop)
    if client is None:
        client = _default_async[loop] = AsyncClient(ClientConfig.from_env())
    return client


def close_default_client() -> None:
    """Close the shared sync client; the next request creates a fresh one."""
    global _default
    with _default_lock:
        if _default is not None:
            _default.close()
            _default = None


async def aclose_default_client() -> None:
    """Close the shared async client of the running event loop, if one was created."""
    client = _default_async.pop(asyncio.get_running_loop(), None)
    if client is not None:
        await client.close()
