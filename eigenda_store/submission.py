"""
eigenda_store.submission
========================

Store a value on the disperser and wait for its placement.

Lifecycle of one put():

    ENCODING -> SUBMITTED -> POLLING -> CONFIRMED
                                     -> FAILED | INSUFFICIENT_SIGNATURES
    ENCODING -> REJECTED                 (encoded payload over the size ceiling)
    any      -> TIMED_OUT                (max_timeout_ms elapsed first)

1. serialize + stride-encode the value; reject oversize payloads locally
2. disperse, keeping the request id
3. every poll interval (sleep first, then poll) query the status; a reply may
   carry the blob index and batch tag once placement is final
4. stop when the status is CONFIRMED/FAILED/INSUFFICIENT_SIGNATURES *or* a
   blob index has been seen, whichever happens first
5. succeed only when both index and batch tag are known and the last status
   is CONFIRMED

Note that step 4 also exits on a pending status as soon as an index shows up;
step 5 then reports it as UnconfirmedSubmissionError. Callers relying on
placement under a non-CONFIRMED status should treat that error accordingly.

Timeouts
--------
The main flow runs as its own task and is raced against the deadline with
`asyncio.wait`. If the deadline wins, the task is abandoned rather than
cancelled: it keeps running, and whatever it eventually produces is dropped.
`SubmissionController.aclose()` cancels abandoned tasks that are still running.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Set

from .codec import ChunkCodec
from .errors import (
    EigenDAError,
    IncompleteConfirmationError,
    PayloadTooLargeError,
    SubmissionError,
    SubmissionTimeoutError,
    UnconfirmedSubmissionError,
)
from .identifier import BlobIdentifier
from .limits import SizeGuard
from .metrics import ClientMetrics
from .serde import JsonSerializer, PayloadSerializer
from .transport.base import TERMINAL_STATUSES, BlobStatus, DisperserTransport

log = logging.getLogger(__name__)


class SubmissionPhase(str, Enum):
    ENCODING = "ENCODING"
    SUBMITTED = "SUBMITTED"
    POLLING = "POLLING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    INSUFFICIENT_SIGNATURES = "INSUFFICIENT_SIGNATURES"
    TIMED_OUT = "TIMED_OUT"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self not in (SubmissionPhase.ENCODING, SubmissionPhase.SUBMITTED, SubmissionPhase.POLLING)


@dataclass
class SubmissionState:
    """Per-call progress of one put(); discarded once the call resolves."""

    phase: SubmissionPhase = SubmissionPhase.ENCODING
    request_id: Optional[bytes] = None
    latest_status: Optional[BlobStatus] = None
    discovered_index: Optional[int] = None
    discovered_batch_tag: Optional[bytes] = None
    polls: int = 0

    @property
    def request_id_hex(self) -> Optional[str]:
        return self.request_id.hex() if self.request_id is not None else None


@dataclass(frozen=True)
class PutOptions:
    """
    Per-call overrides. `None` falls back to the controller's defaults; a
    controller without a default timeout waits without bound.
    """

    max_timeout_ms: Optional[int] = None
    poll_interval_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_timeout_ms is not None and self.max_timeout_ms <= 0:
            raise ValueError("max_timeout_ms must be > 0")
        if self.poll_interval_ms is not None and self.poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be > 0")


_FAILURE_PHASES = {
    BlobStatus.FAILED: SubmissionPhase.FAILED,
    BlobStatus.INSUFFICIENT_SIGNATURES: SubmissionPhase.INSUFFICIENT_SIGNATURES,
}


class SubmissionController:
    """
    Drives put() against a DisperserTransport.

    Parameters
    ----------
    transport : DisperserTransport
        Disperser access; shared by concurrent calls.
    serializer : PayloadSerializer | None
        Value <-> bytes; JsonSerializer by default.
    size_guard : SizeGuard | None
        Ceiling for the encoded payload; 2 MiB by default.
    poll_interval_ms : int
        Delay before each status poll.
    max_timeout_ms : int | None
        Default deadline for a whole put(); None waits without bound.
    metrics : ClientMetrics | None
        Optional instruments.
    """

    def __init__(
        self,
        transport: DisperserTransport,
        *,
        serializer: Optional[PayloadSerializer] = None,
        codec: Optional[ChunkCodec] = None,
        size_guard: Optional[SizeGuard] = None,
        poll_interval_ms: int = 1000,
        max_timeout_ms: Optional[int] = None,
        metrics: Optional[ClientMetrics] = None,
    ) -> None:
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be > 0")
        if max_timeout_ms is not None and max_timeout_ms <= 0:
            raise ValueError("max_timeout_ms must be > 0")
        self.transport = transport
        self.serializer = serializer or JsonSerializer()
        self.codec = codec or ChunkCodec()
        self.size_guard = size_guard or SizeGuard()
        self.poll_interval_ms = int(poll_interval_ms)
        self.max_timeout_ms = max_timeout_ms
        self.metrics = metrics
        self._abandoned: Set[asyncio.Task] = set()
        self._seq = itertools.count(1)

    # ---- Public API ----------------------------------------------------------

    async def put(self, value: Any, options: Optional[PutOptions] = None) -> BlobIdentifier:
        """
        Store `value`; return its BlobIdentifier once confirmed.

        Raises:
            PayloadTooLargeError, IncompleteConfirmationError,
            UnconfirmedSubmissionError, SubmissionTimeoutError,
            SerializationError, TransportError, or SubmissionError wrapping
            any other failure.
        """
        opts = options or PutOptions()
        timeout_ms = opts.max_timeout_ms if opts.max_timeout_ms is not None else self.max_timeout_ms
        interval_ms = opts.poll_interval_ms if opts.poll_interval_ms is not None else self.poll_interval_ms

        call_id = next(self._seq)
        state = SubmissionState()
        started = time.perf_counter()
        task = asyncio.create_task(self._submit(value, state, interval_ms, call_id))
        try:
            if timeout_ms is None:
                return await task
            try:
                done, _ = await asyncio.wait({task}, timeout=timeout_ms / 1000.0)
            except asyncio.CancelledError:
                task.cancel()
                raise
            if not done:
                self._abandon(task, call_id)
                self._transition(state, SubmissionPhase.TIMED_OUT, call_id)
                log.warning("put[%d] timed out after %d ms (request_id=%s)", call_id, timeout_ms, state.request_id_hex)
                raise SubmissionTimeoutError(timeout_ms, request_id=state.request_id_hex)
            return task.result()
        finally:
            self._observe(state, started)

    async def aclose(self) -> None:
        """Cancel submissions abandoned by a timeout that are still running."""
        tasks = list(self._abandoned)
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def abandoned(self) -> int:
        """Number of timed-out submissions still running in the background."""
        return len(self._abandoned)

    # ---- Main flow -----------------------------------------------------------

    async def _submit(self, value: Any, state: SubmissionState, interval_ms: int, call_id: int) -> BlobIdentifier:
        try:
            return await self._run(value, state, interval_ms, call_id)
        except EigenDAError as e:
            if not state.phase.is_terminal:
                self._transition(state, SubmissionPhase.FAILED, call_id)
            log.warning("put[%d] failed: %s", call_id, e)
            raise
        except Exception as e:
            self._transition(state, SubmissionPhase.FAILED, call_id)
            log.warning("put[%d] failed: %r", call_id, e)
            raise SubmissionError(f"put failed: {e}", data={"request_id": state.request_id_hex}) from e

    async def _run(self, value: Any, state: SubmissionState, interval_ms: int, call_id: int) -> BlobIdentifier:
        encoded = self.codec.encode(self.serializer.dumps(value))
        if not self.size_guard.fits(encoded):
            self._transition(state, SubmissionPhase.REJECTED, call_id)
            raise PayloadTooLargeError(len(encoded), self.size_guard.max_size_bytes)
        if self.metrics is not None:
            self.metrics.payload_bytes.labels(direction="out").observe(len(encoded))

        reply = await self.transport.disperse(encoded)
        state.request_id = reply.request_id
        state.latest_status = reply.status
        self._transition(state, SubmissionPhase.SUBMITTED, call_id)

        self._transition(state, SubmissionPhase.POLLING, call_id)
        while True:
            await asyncio.sleep(interval_ms / 1000.0)
            status = await self.transport.poll_status(reply.request_id)
            state.polls += 1
            state.latest_status = status.status
            if status.blob_index is not None:
                state.discovered_index = status.blob_index
            if status.batch_tag is not None:
                state.discovered_batch_tag = status.batch_tag
            if self.metrics is not None:
                self.metrics.status_polls_total.labels(status=status.status.name).inc()
            log.debug(
                "put[%d] poll #%d: status=%s index=%s",
                call_id,
                state.polls,
                status.status.name,
                state.discovered_index,
            )
            if state.latest_status in TERMINAL_STATUSES or state.discovered_index is not None:
                break

        return self._resolve(state, call_id)

    def _resolve(self, state: SubmissionState, call_id: int) -> BlobIdentifier:
        status = state.latest_status if state.latest_status is not None else BlobStatus.UNKNOWN
        if state.discovered_index is None or state.discovered_batch_tag is None:
            self._transition(state, _FAILURE_PHASES.get(status, SubmissionPhase.FAILED), call_id)
            raise IncompleteConfirmationError(
                f"polling stopped with status {status.name} before blob index and batch tag were both reported",
                data={
                    "status": int(status),
                    "request_id": state.request_id_hex,
                    "index": state.discovered_index,
                    "has_batch_tag": state.discovered_batch_tag is not None,
                },
            )
        if status != BlobStatus.CONFIRMED:
            self._transition(state, _FAILURE_PHASES.get(status, SubmissionPhase.FAILED), call_id)
            raise UnconfirmedSubmissionError(status, request_id=state.request_id_hex)

        self._transition(state, SubmissionPhase.CONFIRMED, call_id)
        ident = BlobIdentifier(index=state.discovered_index, batch_tag=state.discovered_batch_tag)
        log.info("put[%d] confirmed as %s after %d polls", call_id, ident, state.polls)
        return ident

    # ---- Internals -----------------------------------------------------------

    @staticmethod
    def _transition(state: SubmissionState, phase: SubmissionPhase, call_id: int) -> None:
        log.debug("put[%d] %s -> %s", call_id, state.phase.value, phase.value)
        state.phase = phase

    def _abandon(self, task: asyncio.Task, call_id: int) -> None:
        self._abandoned.add(task)

        def _done(t: asyncio.Task) -> None:
            self._abandoned.discard(t)
            if t.cancelled():
                return
            exc = t.exception()
            if exc is not None:
                log.debug("put[%d] finished after its timeout with %r; discarded", call_id, exc)
            else:
                log.debug("put[%d] resolved to %s after its timeout; discarded", call_id, t.result())

        task.add_done_callback(_done)

    def _observe(self, state: SubmissionState, started: float) -> None:
        if self.metrics is None:
            return
        outcome = state.phase.value.lower() if state.phase.is_terminal else "error"
        self.metrics.submissions_total.labels(outcome=outcome).inc()
        self.metrics.submission_seconds.observe(time.perf_counter() - started)


__all__ = ["SubmissionPhase", "SubmissionState", "PutOptions", "SubmissionController"]
