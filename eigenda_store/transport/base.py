"""
Transport contract consumed by the submission and retrieval controllers.

The disperser is reached through three calls:

- disperse(data)             -> DisperseReply(request_id, status)
- poll_status(request_id)    -> StatusReply(status, blob_index?, batch_tag?)
- retrieve(index, batch_tag) -> encoded bytes

Only CONFIRMED, FAILED and INSUFFICIENT_SIGNATURES are terminal for the
client; every other status is "still pending". Blob index and batch tag are
reported once the network has assigned final placement, independently of the
status value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, FrozenSet, Optional, Protocol, runtime_checkable


class BlobStatus(IntEnum):
    # Disperser status codes
    UNKNOWN = 0
    PROCESSING = 1
    CONFIRMED = 2
    FAILED = 3
    FINALIZED = 4
    INSUFFICIENT_SIGNATURES = 5
    DISPERSING = 6

    @classmethod
    def parse(cls, value: Any) -> "BlobStatus":
        """
        Accept an int code, a name ("CONFIRMED"), or a qualified name
        ("BlobStatus.CONFIRMED"). Anything unrecognised maps to UNKNOWN.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                return cls.UNKNOWN
        if isinstance(value, str):
            name = value.strip().rsplit(".", 1)[-1].upper()
            if name.isdigit():
                return cls.parse(int(name))
            return cls.__members__.get(name, cls.UNKNOWN)
        return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: FrozenSet[BlobStatus] = frozenset(
    {BlobStatus.CONFIRMED, BlobStatus.FAILED, BlobStatus.INSUFFICIENT_SIGNATURES}
)


@dataclass(frozen=True)
class DisperseReply:
    request_id: bytes
    status: BlobStatus


@dataclass(frozen=True)
class StatusReply:
    status: BlobStatus
    blob_index: Optional[int] = None
    batch_tag: Optional[bytes] = None


@runtime_checkable
class DisperserTransport(Protocol):
    """
    Minimal async interface to the disperser. Implementations must be safe
    for concurrent use by several in-flight `put`/`get` calls.
    """

    async def disperse(self, data: bytes) -> DisperseReply: ...

    async def poll_status(self, request_id: bytes) -> StatusReply: ...

    async def retrieve(self, index: int, batch_tag: bytes) -> bytes: ...


__all__ = [
    "BlobStatus",
    "TERMINAL_STATUSES",
    "DisperseReply",
    "StatusReply",
    "DisperserTransport",
]
