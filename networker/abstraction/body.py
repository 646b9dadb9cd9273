"""
Body payloads accepted by :meth:`networker.Request.body`.

Each variant says explicitly how it lands in the request:

* :class:`Raw`: text sent verbatim (XML / TEXT bodies);
* :class:`Record`: an object with named attributes, flattened into body
  fields with lower-cased names and values formatted as text;
* :class:`Fields`: a mapping merged into the body fields as is.

Plain Python values are turned into one of these by :func:`as_body`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

from ..errors import UnsupportedBodyError

Formatter = Callable[[Any], str]


@dataclass(frozen=True)
class Raw:
    """Pre-formatted text, transmitted byte-for-byte."""

    text: str


@dataclass(frozen=True)
class Record:
    """A structured object whose attributes become body fields."""

    obj: Any
    formatter: Optional[Formatter] = None
    """Overrides the request's formatter for this record only."""

    def flatten(self, default: Formatter = str) -> dict[str, str]:
        fmt = self.formatter or default
        return {name.lower(): fmt(value) for name, value in _attributes(self.obj)}


@dataclass(frozen=True)
class Fields:
    """Named values merged into the body fields (later keys win)."""

    values: Mapping[str, Any]


Body = Union[Raw, Record, Fields]


def _attributes(obj: Any) -> list[tuple[str, Any]]:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name)) for f in dataclasses.fields(obj)]
    if isinstance(obj, tuple) and hasattr(obj, "_fields"):
        return list(obj._asdict().items())
    return [(k, v) for k, v in vars(obj).items() if not k.startswith("_")]


def _is_record(payload: Any) -> bool:
    if isinstance(payload, type) or callable(payload):
        return False
    if dataclasses.is_dataclass(payload):
        return True
    if isinstance(payload, tuple):
        return hasattr(payload, "_fields")
    return hasattr(payload, "__dict__")


def as_body(payload: Any) -> Body:
    """Wrap a plain value in the matching body variant.

    ``str`` → :class:`Raw`, any mapping → :class:`Fields`, dataclass instances,
    named tuples and plain objects → :class:`Record`. Variants pass through.
    """
    if isinstance(payload, (Raw, Record, Fields)):
        return payload
    if isinstance(payload, str):
        return Raw(payload)
    if isinstance(payload, Mapping):
        return Fields(payload)
    if _is_record(payload):
        return Record(payload)
    raise UnsupportedBodyError(
        f"Cannot use {type(payload).__name__!r} as a request body; "
        "pass a str, a mapping, a record object or a Raw/Record/Fields variant"
    )
