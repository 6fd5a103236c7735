"""
eigenda_store.transport
=======================

Disperser transports. `base` defines the async contract the controllers
consume; `http` talks to a JSON gateway with httpx; `memory` simulates the
network in-process.
"""

from __future__ import annotations

from .base import TERMINAL_STATUSES, BlobStatus, DisperseReply, DisperserTransport, StatusReply
from .http import HttpDisperserTransport
from .memory import MemoryDisperserTransport

__all__ = [
    "BlobStatus",
    "TERMINAL_STATUSES",
    "DisperseReply",
    "StatusReply",
    "DisperserTransport",
    "HttpDisperserTransport",
    "MemoryDisperserTransport",
]
