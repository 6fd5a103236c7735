"""
In-process disperser simulator.

Useful for unit tests, examples and the CLI's `--memory` mode. Behaviour:

- Each dispersal gets a fresh request id and starts as PROCESSING.
- After `confirm_after_polls` status polls it turns CONFIRMED and reports a
  blob index (sequential from `start_index`) and the batch tag.
- `confirm_after_polls=None` keeps every submission pending forever.
- `script` replaces the above with a fixed sequence of StatusReply values,
  replayed per dispersal (the last entry repeats once exhausted).

State is only mutated between awaits, so concurrent calls on one event loop
are safe.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..errors import TransportError
from .base import BlobStatus, DisperseReply, StatusReply

log = logging.getLogger(__name__)


@dataclass
class _Pending:
    data: bytes
    polls: int = 0
    placement: Optional[Tuple[int, bytes]] = None


class MemoryDisperserTransport:
    def __init__(
        self,
        *,
        confirm_after_polls: Optional[int] = 2,
        start_index: int = 0,
        batch_tag: Optional[bytes] = None,
        script: Optional[Sequence[StatusReply]] = None,
    ) -> None:
        if confirm_after_polls is not None and confirm_after_polls < 0:
            raise ValueError("confirm_after_polls must be >= 0")
        if script is not None and not script:
            raise ValueError("script must not be empty")
        self.confirm_after_polls = confirm_after_polls
        self.batch_tag = batch_tag if batch_tag is not None else hashlib.sha256(b"batch-0").digest()
        self.script: Optional[List[StatusReply]] = list(script) if script is not None else None
        self._next_index = itertools.count(start_index)
        self._next_request = itertools.count(1)
        self._pending: Dict[bytes, _Pending] = {}
        self._blobs: Dict[Tuple[int, bytes], bytes] = {}
        self.calls: List[Tuple[str, object]] = []

    # --- test helpers

    def store_raw(self, index: int, batch_tag: bytes, data: bytes) -> None:
        """Place arbitrary bytes at (index, batch_tag), bypassing dispersal."""
        self._blobs[(index, bytes(batch_tag))] = bytes(data)

    def polls_for(self, request_id: bytes) -> int:
        return self._pending[request_id].polls

    # --- DisperserTransport

    async def disperse(self, data: bytes) -> DisperseReply:
        self.calls.append(("disperse", len(data)))
        request_id = hashlib.sha256(b"request-%d" % next(self._next_request)).digest()
        self._pending[request_id] = _Pending(data=bytes(data))
        return DisperseReply(request_id=request_id, status=BlobStatus.PROCESSING)

    async def poll_status(self, request_id: bytes) -> StatusReply:
        self.calls.append(("poll_status", request_id))
        pending = self._pending.get(request_id)
        if pending is None:
            raise TransportError("unknown request id", data={"request_id": request_id.hex()})
        pending.polls += 1

        if self.script is not None:
            reply = self.script[min(pending.polls, len(self.script)) - 1]
            if reply.blob_index is not None and reply.batch_tag is not None:
                self._blobs[(reply.blob_index, reply.batch_tag)] = pending.data
            return reply

        if self.confirm_after_polls is None or pending.polls < self.confirm_after_polls:
            return StatusReply(status=BlobStatus.PROCESSING)

        if pending.placement is None:
            pending.placement = (next(self._next_index), self.batch_tag)
            self._blobs[pending.placement] = pending.data
            log.debug("confirmed request %s at %s", request_id.hex()[:16], pending.placement[0])
        index, tag = pending.placement
        return StatusReply(status=BlobStatus.CONFIRMED, blob_index=index, batch_tag=tag)

    async def retrieve(self, index: int, batch_tag: bytes) -> bytes:
        self.calls.append(("retrieve", (index, batch_tag)))
        try:
            return self._blobs[(index, bytes(batch_tag))]
        except KeyError:
            raise TransportError(
                f"blob not found at index {index}",
                data={"index": index, "batch_tag": bytes(batch_tag).hex()},
            ) from None


__all__ = ["MemoryDisperserTransport"]
