"""
HTTP helpers: body encoding, query merge, Cookie/Authorization headers,
Set-Cookie parsing, charset guessing.

No dependency on curl_cffi here, only stdlib and our own models.
All functions are pure, which keeps them easy to test on their own.
"""
from __future__ import annotations

import json
from base64 import b64encode
from email.utils import parsedate_to_datetime
from http.cookies import CookieError, SimpleCookie
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..abstraction.content import ContentType
from ..abstraction.cookies import Cookie

# ───────────────────── request body ──────────────────────────────────


def encode_body(
    content_type: ContentType,
    fields: Mapping[str, Any],
    raw: str,
    formatter: Callable[[Any], str] = str,
) -> bytes:
    """Serialize the body for *content_type*.

    JSON and FORM read *fields*, XML and TEXT send *raw* untouched. Empty
    fields still encode, to ``{}`` for JSON and to nothing for FORM.
    """
    if content_type is ContentType.JSON:
        return json.dumps(
            dict(fields), separators=(",", ":"), ensure_ascii=False, default=formatter
        ).encode("utf-8")
    if content_type is ContentType.FORM:
        return form_encode(fields, formatter).encode("ascii")
    return raw.encode("utf-8")


def form_encode(fields: Mapping[str, Any], formatter: Callable[[Any], str] = str) -> str:
    """``application/x-www-form-urlencoded`` with keys sorted."""
    return urlencode([(k, formatter(fields[k])) for k in sorted(fields)])


# ───────────────────── URL query ─────────────────────────────────────


def merge_query(url: str, params: Mapping[str, Any]) -> str:
    """Add *params* to the query string already present in *url*.

    Values already in the URL are kept; a key present in both ends up with
    several values. The query is re-encoded with keys sorted, values of one
    key keep their order.
    """
    parts = urlsplit(url)
    grouped: dict[str, list[str]] = {}
    for k, v in parse_qsl(parts.query, keep_blank_values=True):
        grouped.setdefault(k, []).append(v)
    for k, v in params.items():
        grouped.setdefault(k, []).append(str(v))

    query = urlencode([(k, v) for k in sorted(grouped) for v in grouped[k]])
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


# ───────────────────── outbound headers ──────────────────────────────

_TOKEN_CHARS = frozenset(
    "!#$%&'*+-.^_`|~0123456789"
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)


def compose_cookie_header(cookies: Mapping[str, str], existing: str = "") -> str:
    """``name=value`` pairs joined with ``; ``, appended to an existing Cookie header."""
    kv = [
        f"{sanitize_cookie_name(name)}={sanitize_cookie_value(value)}"
        for name, value in cookies.items()
    ]
    if existing:
        kv.insert(0, existing)
    return "; ".join(kv)


def sanitize_cookie_name(name: str) -> str:
    """Keep RFC 7230 token characters only; CR and LF become ``-``."""
    name = name.replace("\r", "-").replace("\n", "-")
    return "".join(ch for ch in name if ch in _TOKEN_CHARS)


def sanitize_cookie_value(value: str) -> str:
    """Drop characters outside RFC 6265 cookie-octets, quote if space or comma remain."""
    value = "".join(ch for ch in value if " " <= ch < "\x7f" and ch not in "\";\\")
    if " " in value or "," in value:
        return f'"{value}"'
    return value


def basic_auth_header(username: str, password: str) -> str:
    token = b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


# ───────────────────── charset helper ────────────────────────────────


def guess_encoding(headers: Mapping[str, str]) -> str:
    ctype = headers.get("content-type", "")
    if "charset=" in ctype:
        return (
            ctype.split("charset=", 1)[1].split(";", 1)[0].strip(" \"'") or "utf-8"
        )
    return "utf-8"


# ───────────────────── Set-Cookie → Cookie objects ───────────────────


def collect_set_cookie_headers(pairs: Iterable[Tuple[str, str]]) -> list[str]:
    """Every *Set-Cookie* value out of (name, value) header pairs."""
    return [v for k, v in pairs if k.lower() == "set-cookie"]


def _expires_timestamp(raw: str) -> int:
    if not raw:
        return 0
    try:
        return int(parsedate_to_datetime(raw).timestamp())
    except (TypeError, ValueError):
        return 0


def _same_site(raw: str) -> Optional[str]:
    value = raw.capitalize()
    return value if value in ("Lax", "Strict", "None") else None


def parse_set_cookie(raw_headers: list[str], default_domain: str) -> list[Cookie]:
    out: list[Cookie] = []
    for raw in raw_headers:
        jar = SimpleCookie()
        try:
            jar.load(raw)
        except CookieError:
            continue
        for m in jar.values():
            max_age = m["max-age"]
            out.append(
                Cookie(
                    name=m.key,
                    value=m.value,
                    domain=(m["domain"] or default_domain).lstrip(".").lower(),
                    path=m["path"] or "/",
                    expires=_expires_timestamp(m["expires"]),
                    max_age=int(max_age) if str(max_age).lstrip("-").isdigit() else 0,
                    same_site=_same_site(m["samesite"]),  # type: ignore[arg-type]
                    secure=bool(m["secure"]),
                    http_only=bool(m["httponly"]),
                )
            )
    return out
