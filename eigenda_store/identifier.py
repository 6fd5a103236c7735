"""
Location of a stored blob, and its portable string form.

A blob is addressed by its position inside a dispersal batch plus an opaque
reference to that batch (the batch header hash). The canonical string is

    "<decimal index>-<standard base64 of batch tag>"

e.g. BlobIdentifier(5, b"\\x01\\x02") <-> "5-AQI=". The standard base64
alphabet has no "-", so the separator is unambiguous.
"""

from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass

from .errors import InvalidIdentifierError

_INDEX_RE = re.compile(r"[0-9]+")

#: Blob indices are unsigned 64-bit integers on the wire.
MAX_BLOB_INDEX: int = 2**64 - 1


@dataclass(frozen=True)
class BlobIdentifier:
    index: int
    batch_tag: bytes

    def __post_init__(self) -> None:
        if isinstance(self.index, bool) or not isinstance(self.index, int):
            raise InvalidIdentifierError(f"index must be an integer, got {type(self.index).__name__}")
        if not 0 <= self.index <= MAX_BLOB_INDEX:
            # No repr(): ints past 4300 digits cannot be rendered as str.
            side = "negative" if self.index < 0 else "too large"
            raise InvalidIdentifierError(f"index must be in [0, {MAX_BLOB_INDEX}], got a {side} value")
        if isinstance(self.batch_tag, (bytearray, memoryview)):
            object.__setattr__(self, "batch_tag", bytes(self.batch_tag))
        elif not isinstance(self.batch_tag, bytes):
            raise InvalidIdentifierError(f"batch_tag must be bytes, got {type(self.batch_tag)!r}")

    def to_canonical_string(self) -> str:
        return f"{self.index}-{base64.b64encode(self.batch_tag).decode('ascii')}"

    @classmethod
    def from_canonical_string(cls, s: str) -> "BlobIdentifier":
        """
        Parse "<index>-<base64>".

        Raises:
            InvalidIdentifierError unless `s` has exactly two "-"-separated
            parts, a decimal index no larger than MAX_BLOB_INDEX and valid
            base64.
        """
        if not isinstance(s, str):
            raise InvalidIdentifierError(f"identifier must be a string, got {type(s)!r}")
        parts = s.split("-")
        if len(parts) != 2:
            raise InvalidIdentifierError(
                f"identifier must have the form '<index>-<base64>', got {s!r}",
                data={"identifier": s},
            )
        index_s, tag_s = parts
        if not _INDEX_RE.fullmatch(index_s):
            raise InvalidIdentifierError(f"invalid blob index {index_s!r}", data={"identifier": s})
        try:
            tag = base64.b64decode(tag_s, validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidIdentifierError(f"invalid base64 batch tag {tag_s!r}", data={"identifier": s}) from e
        try:
            index = int(index_s)
        except ValueError as e:
            raise InvalidIdentifierError(f"invalid blob index {index_s[:32]!r}", data={"identifier": s[:64]}) from e
        return cls(index=index, batch_tag=tag)

    def __str__(self) -> str:
        return self.to_canonical_string()


__all__ = ["MAX_BLOB_INDEX", "BlobIdentifier"]
