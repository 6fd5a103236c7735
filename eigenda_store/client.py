"""
eigenda_store.client
====================

High-level key/value facade over the disperser.

    from eigenda_store import EigenDAClient

    async with EigenDAClient() as client:
        ident = await client.put({"hello": "world"})
        print(ident)                       # "5-AQI=" style identifier
        value = await client.get(str(ident))

Without an explicit transport the client talks HTTP to `config.disperser_url`.
Pass `MemoryDisperserTransport()` for local runs and tests.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Union

from .config import ClientConfig
from .errors import ConfigError
from .identifier import BlobIdentifier
from .limits import SizeGuard
from .metrics import ClientMetrics, get_metrics
from .retrieval import RetrievalController
from .serde import JsonSerializer, PayloadSerializer
from .submission import PutOptions, SubmissionController
from .transport.base import DisperserTransport
from .transport.http import HttpDisperserTransport

log = logging.getLogger(__name__)

IdentifierLike = Union[BlobIdentifier, str]


class EigenDAClient:
    """
    put(value) -> BlobIdentifier, get(identifier) -> value.

    Parameters
    ----------
    transport : DisperserTransport | None
        Disperser access. When omitted an HttpDisperserTransport is built from
        `config` and closed together with the client.
    config : ClientConfig | None
        Defaults to `ClientConfig.from_env()`.
    serializer : PayloadSerializer | None
        JsonSerializer unless given.
    metrics : ClientMetrics | None
        Prometheus instruments; the process-wide `get_metrics()` set by default.
    """

    def __init__(
        self,
        transport: Optional[DisperserTransport] = None,
        *,
        config: Optional[ClientConfig] = None,
        serializer: Optional[PayloadSerializer] = None,
        metrics: Optional[ClientMetrics] = None,
    ) -> None:
        cfg = config or ClientConfig.from_env()
        cfg.validate()
        if cfg.network == "mainnet":
            raise ConfigError("permissionless access to mainnet is not yet available.", data={"network": cfg.network})
        self.config = cfg
        self.serializer = serializer or JsonSerializer()
        self.metrics = metrics if metrics is not None else get_metrics()

        self._own_transport = transport is None
        if transport is None:
            transport = HttpDisperserTransport(
                cfg.disperser_url,
                account_id=cfg.account_id,
                timeout_s=cfg.request_timeout,
                headers={"User-Agent": cfg.user_agent},
            )
        self.transport = transport

        self._submission = SubmissionController(
            transport,
            serializer=self.serializer,
            size_guard=SizeGuard(cfg.max_payload_bytes),
            poll_interval_ms=cfg.poll_interval_ms,
            max_timeout_ms=cfg.max_timeout_ms,
            metrics=self.metrics,
        )
        self._retrieval = RetrievalController(transport, serializer=self.serializer, metrics=self.metrics)
        log.debug(
            "client ready: transport=%s network=%s poll_interval_ms=%d",
            type(transport).__name__,
            cfg.network,
            cfg.poll_interval_ms,
        )

    # --- context management

    async def aclose(self) -> None:
        await self._submission.aclose()
        if self._own_transport:
            close = getattr(self.transport, "aclose", None)
            if close is not None:
                await close()

    async def __aenter__(self) -> "EigenDAClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- operations

    async def put(self, value: Any, options: Optional[PutOptions] = None) -> BlobIdentifier:
        """Store `value`; see SubmissionController.put for failure modes."""
        return await self._submission.put(value, options)

    async def get(self, identifier: IdentifierLike) -> Any:
        """
        Fetch the value stored at `identifier` (a BlobIdentifier or its
        canonical string). A malformed string raises InvalidIdentifierError
        before any network call.
        """
        if isinstance(identifier, str):
            identifier = BlobIdentifier.from_canonical_string(identifier)
        return await self._retrieval.get(identifier)


__all__ = ["EigenDAClient"]
