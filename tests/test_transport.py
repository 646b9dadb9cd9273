"""Client behaviour against fake curl_cffi sessions: failure paths and stream release."""
from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from curl_cffi import CurlError
from curl_cffi.requests import Headers

import networker
from networker import AsyncClient, BodyReadError, Client, ClientConfig, TransportError
from networker.transport import aclose_default_client, default_async_client


def _fake_response(chunks=(b"he", b"llo"), fail_after: int | None = None) -> MagicMock:
    r = MagicMock()
    r.url = "http://h/final"
    r.status_code = 200
    r.reason = "OK"
    r.headers = Headers(
        [("Content-Type", "text/plain"), ("Set-Cookie", "sid=1"), ("Set-Cookie", "b=2")]
    )

    def iter_content():
        for i, chunk in enumerate(chunks):
            if fail_after is not None and i == fail_after:
                raise CurlError("connection reset while reading")
            yield chunk

    async def aiter_content():
        for chunk in iter_content():
            yield chunk

    r.iter_content.side_effect = iter_content
    r.aiter_content.side_effect = aiter_content
    r.aclose = AsyncMock()
    return r


# ===========================================================================
# sync
# ===========================================================================
def test_success_reads_body_and_closes_stream():
    resp = _fake_response()
    session = MagicMock()
    session.request.return_value = resp

    body, response, error = networker.get("http://h/p").client(Client(session=session)).do()

    assert error is None
    assert body == b"hello"
    assert response.status_code == 200
    assert response.url.full_url == "http://h/final"
    assert response.headers["content-type"] == "text/plain"
    assert [c.name for c in response.cookies] == ["sid", "b"]
    assert all(c.domain == "h" for c in response.cookies)
    resp.close.assert_called_once()

    kwargs = session.request.call_args.kwargs
    assert kwargs["stream"] is True
    assert kwargs["discard_cookies"] is True
    assert kwargs["data"] is None


def test_request_is_sent_as_prepared():
    session = MagicMock()
    session.request.return_value = _fake_response()

    networker.post("http://h/p", {"q": "1"}, data={"foo": "bar"}).header("X-A", "1").client(
        Client(session=session)
    ).do()

    args, kwargs = session.request.call_args
    assert args == ("POST", "http://h/p?q=1")
    assert kwargs["data"] == b'{"foo":"bar"}'
    assert kwargs["headers"] == {"X-A": "1", "Content-Type": "application/json"}


def test_body_read_failure_keeps_metadata_and_closes_stream():
    resp = _fake_response(chunks=(b"a", b"b", b"c"), fail_after=1)
    session = MagicMock()
    session.request.return_value = resp

    result = networker.get("http://h/").client(Client(session=session)).do()

    assert result.body is None
    assert result.response is not None and result.response.status_code == 200
    assert isinstance(result.error, BodyReadError)
    assert result.error.response is result.response
    assert isinstance(result.error.__cause__, CurlError)
    resp.close.assert_called_once()


def test_transport_failure_returns_error_without_body():
    session = MagicMock()
    session.request.side_effect = CurlError("Could not resolve host: nowhere.invalid")

    body, response, error = networker.get("http://nowhere.invalid/").client(
        Client(session=session)
    ).do()

    assert body is None
    assert response is None
    assert isinstance(error, TransportError)
    assert "resolve host" in str(error)


def test_programming_errors_propagate():
    session = MagicMock()
    session.request.side_effect = KeyError("boom")

    with pytest.raises(KeyError):
        networker.get("http://h/").client(Client(session=session)).do()


def test_raise_for_error():
    session = MagicMock()
    session.request.side_effect = CurlError("refused")
    result = networker.get("http://h/").client(Client(session=session)).do()

    with pytest.raises(TransportError):
        result.raise_for_error()


def test_client_close_releases_session():
    session = MagicMock()
    client = Client(session=session)
    with client:
        pass
    session.close.assert_called_once()
    client.close()
    session.close.assert_called_once()


# ===========================================================================
# config
# ===========================================================================
def test_config_session_kwargs():
    assert ClientConfig().session_kwargs() == {}
    cfg = ClientConfig(impersonate="chrome", proxy="http://p:1", headers={"User-Agent": "x"})
    assert cfg.session_kwargs() == {
        "impersonate": "chrome",
        "proxy": "http://p:1",
        "headers": {"User-Agent": "x"},
    }


def test_config_from_env(monkeypatch):
    monkeypatch.setenv("NETWORKER_IMPERSONATE", "safari")
    monkeypatch.delenv("NETWORKER_PROXY", raising=False)
    cfg = ClientConfig.from_env()
    assert cfg.impersonate == "safari"
    assert cfg.proxy is None


# ===========================================================================
# async
# ===========================================================================
@pytest.mark.asyncio
async def test_async_success_and_close():
    resp = _fake_response()
    session = MagicMock()
    session.request = AsyncMock(return_value=resp)

    body, response, error = await networker.get("http://h/").client(
        AsyncClient(session=session)
    ).do_async()

    assert (body, error) == (b"hello", None)
    assert response.reason == "OK"
    resp.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_body_read_failure():
    resp = _fake_response(fail_after=0)
    session = MagicMock()
    session.request = AsyncMock(return_value=resp)

    result = await networker.get("http://h/").client(AsyncClient(session=session)).do_async()

    assert result.body is None
    assert isinstance(result.error, BodyReadError)
    assert result.response.status_code == 200
    resp.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_async_transport_failure():
    session = MagicMock()
    session.request = AsyncMock(side_effect=CurlError("Failed to connect"))

    result = await networker.get("http://h/").client(AsyncClient(session=session)).do_async()

    assert result.body is None
    assert result.response is None
    assert isinstance(result.error, TransportError)


@pytest.mark.asyncio
async def test_async_send_discards_response_cookies():
    session = MagicMock()
    session.request = AsyncMock(return_value=_fake_response())

    await networker.get("http://h/").client(AsyncClient(session=session)).do_async()

    assert session.request.call_args.kwargs["discard_cookies"] is True


@pytest.mark.asyncio
async def test_aclose_default_client_releases_loop_client():
    first = default_async_client()
    assert default_async_client() is first

    session = MagicMock()
    session.close = AsyncMock()
    first._session = session

    await aclose_default_client()

    session.close.assert_awaited_once()
    assert default_async_client() is not first
    await aclose_default_client()
