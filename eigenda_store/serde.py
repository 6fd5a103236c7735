"""
Payload serializers: application value <-> bytes.

The client is agnostic to the payload format; anything implementing
`PayloadSerializer` can be injected. `JsonSerializer` is the default and
produces compact UTF-8 JSON.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from .errors import DeserializationError, SerializationError


class PayloadSerializer(Protocol):
    def dumps(self, value: Any) -> bytes: ...

    def loads(self, data: bytes) -> Any: ...


class JsonSerializer:
    """
    Compact JSON (no whitespace, non-ASCII kept as UTF-8).

    `dumps` raises SerializationError for values json cannot encode;
    `loads` raises DeserializationError for bytes that are not UTF-8 JSON.
    """

    def __init__(self, *, sort_keys: bool = False) -> None:
        self.sort_keys = sort_keys

    def dumps(self, value: Any) -> bytes:
        try:
            text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, sort_keys=self.sort_keys)
        except (TypeError, ValueError) as e:
            raise SerializationError(f"value is not JSON-serializable: {e}") from e
        return text.encode("utf-8")

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise DeserializationError(
                "retrieved bytes are not a JSON payload",
                data={"size": len(data)},
            ) from e


__all__ = ["PayloadSerializer", "JsonSerializer"]
