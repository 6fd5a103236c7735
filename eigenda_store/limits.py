"""
Transport size ceiling.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

MiB: int = 1024 * 1024

#: Reference ceiling of the disperser for one encoded blob.
DEFAULT_MAX_PAYLOAD_BYTES: int = 2 * MiB


@dataclass(frozen=True)
class SizeGuard:
    """
    Accepts an encoded payload iff it is strictly smaller than `max_size_bytes`.
    """

    max_size_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES

    def __post_init__(self) -> None:
        if self.max_size_bytes <= 0:
            raise ValueError("max_size_bytes must be > 0")

    def fits(self, data: Union[bytes, bytearray, memoryview]) -> bool:
        return len(data) < self.max_size_bytes


__all__ = ["MiB", "DEFAULT_MAX_PAYLOAD_BYTES", "SizeGuard"]
