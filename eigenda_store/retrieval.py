"""
Fetch a stored blob by identifier and turn it back into the original value:
retrieve -> stride-decode -> deserialize.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from .codec import ChunkCodec
from .errors import EigenDAError, MalformedInputError, RetrievalError
from .identifier import BlobIdentifier
from .metrics import ClientMetrics
from .serde import JsonSerializer, PayloadSerializer
from .transport.base import DisperserTransport

log = logging.getLogger(__name__)


class RetrievalController:
    def __init__(
        self,
        transport: DisperserTransport,
        *,
        serializer: Optional[PayloadSerializer] = None,
        codec: Optional[ChunkCodec] = None,
        metrics: Optional[ClientMetrics] = None,
    ) -> None:
        self.transport = transport
        self.serializer = serializer or JsonSerializer()
        self.codec = codec or ChunkCodec()
        self.metrics = metrics

    async def get(self, identifier: BlobIdentifier) -> Any:
        """
        Return the value stored at `identifier`.

        Raises:
            TransportError when the blob cannot be fetched,
            DeserializationError when the bytes are not a serialized payload,
            RetrievalError for malformed encodings and anything else.
        """
        try:
            value = await self._get(identifier)
        except EigenDAError as e:
            self._count("error")
            log.warning("get %s failed: %s", identifier, e)
            raise
        except Exception as e:
            self._count("error")
            log.warning("get %s failed: %r", identifier, e)
            raise RetrievalError(f"get failed: {e}", data={"identifier": str(identifier)}) from e
        self._count("ok")
        return value

    async def _get(self, identifier: BlobIdentifier) -> Any:
        encoded = await self.transport.retrieve(identifier.index, identifier.batch_tag)
        if self.metrics is not None:
            self.metrics.payload_bytes.labels(direction="in").observe(len(encoded))
        try:
            raw = self.codec.decode(encoded)
        except MalformedInputError as e:
            raise RetrievalError(
                f"retrieved blob is not stride-encoded: {e.message}",
                data={"identifier": str(identifier), **e.data},
            ) from e
        value = self.serializer.loads(raw)
        log.debug("get %s: %d encoded bytes, %d payload bytes", identifier, len(encoded), len(raw))
        return value

    def _count(self, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.retrievals_total.labels(outcome=outcome).inc()


__all__ = ["RetrievalController"]
