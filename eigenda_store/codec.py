"""
eigenda_store.codec
===================

Stride codec for the disperser's field-element aligned blob layout.

The network treats a blob as a sequence of 32-byte field elements, each of
which must stay below the field modulus. Clearing the most-significant byte of
every element keeps it in range, so each 32-byte stride carries one reserved
zero byte followed by 31 payload bytes:

    stride i:  [0x00][ payload[31*i : 31*i + 31] ... zero padded ]

Rules:
  - encode(b) has length 32 * ceil(len(b) / 31); empty input → empty output.
  - decode(e) requires len(e) % 32 == 0 (else MalformedInputError), drops the
    reserved byte of every stride and then strips trailing 0x00 bytes.

Known limitation: decode cannot tell padding from payload, so a payload that
itself ends in 0x00 loses those trailing zeros on the round trip
(encode(b"\\x01\\x02\\x00") decodes to b"\\x01\\x02"). Serialized JSON never
ends in a NUL byte, which is why the client is unaffected.
"""

from __future__ import annotations

from typing import Iterator, Union

from .errors import MalformedInputError

BytesLike = Union[bytes, bytearray, memoryview]

#: Width of one transport field element.
STRIDE: int = 32
#: Reserved (always zero) leading bytes of every stride.
RESERVED_BYTES: int = 1
#: Payload bytes carried by one stride.
PAYLOAD_BYTES_PER_STRIDE: int = STRIDE - RESERVED_BYTES

_RESERVED = b"\x00" * RESERVED_BYTES


def _to_bytes(data: BytesLike) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, bytearray):
        return bytes(data)
    if isinstance(data, memoryview):
        return data.tobytes()
    raise TypeError(f"data must be bytes-like, got {type(data)!r}")


def stride_count(length: int) -> int:
    """Number of strides needed to carry `length` payload bytes."""
    if length < 0:
        raise ValueError("length must be >= 0")
    return (length + PAYLOAD_BYTES_PER_STRIDE - 1) // PAYLOAD_BYTES_PER_STRIDE


def encoded_length(length: int) -> int:
    """Size in bytes of the encoding of a `length`-byte payload."""
    return STRIDE * stride_count(length)


def iter_strides(data: BytesLike) -> Iterator[bytes]:
    """
    Yield the encoded strides of `data` one at a time (each exactly STRIDE bytes).
    """
    raw = _to_bytes(data)
    for pos in range(0, len(raw), PAYLOAD_BYTES_PER_STRIDE):
        piece = raw[pos : pos + PAYLOAD_BYTES_PER_STRIDE]
        yield _RESERVED + piece.ljust(PAYLOAD_BYTES_PER_STRIDE, b"\x00")


def encode_chunks(data: BytesLike) -> bytes:
    """Pack `data` into the 32-byte stride layout."""
    return b"".join(iter_strides(data))


def decode_chunks(encoded: BytesLike) -> bytes:
    """
    Inverse of `encode_chunks`, up to trailing zero bytes (see module docs).

    Raises:
        MalformedInputError if the length is not a multiple of STRIDE.
    """
    raw = _to_bytes(encoded)
    if len(raw) % STRIDE != 0:
        raise MalformedInputError(
            f"encoded length {len(raw)} is not a multiple of {STRIDE}",
            data={"length": len(raw), "stride": STRIDE},
        )
    payload = b"".join(raw[pos + RESERVED_BYTES : pos + STRIDE] for pos in range(0, len(raw), STRIDE))
    return payload.rstrip(b"\x00")


class ChunkCodec:
    """
    Stateless object form of the stride codec, for injection into controllers.
    """

    stride = STRIDE
    payload_bytes_per_stride = PAYLOAD_BYTES_PER_STRIDE

    @staticmethod
    def encode(data: BytesLike) -> bytes:
        return encode_chunks(data)

    @staticmethod
    def decode(encoded: BytesLike) -> bytes:
        return decode_chunks(encoded)


__all__ = [
    "STRIDE",
    "RESERVED_BYTES",
    "PAYLOAD_BYTES_PER_STRIDE",
    "stride_count",
    "encoded_length",
    "iter_strides",
    "encode_chunks",
    "decode_chunks",
    "ChunkCodec",
]
