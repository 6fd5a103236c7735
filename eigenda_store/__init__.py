"""
eigenda-store: key/value storage client for the EigenDA data-availability network.
Convenience exports for the most common APIs.
"""

from .version import __version__  # noqa: F401

# Facade
from .client import EigenDAClient  # noqa: F401

# Config & errors
from .config import ClientConfig, get_config  # noqa: F401
from .errors import (  # noqa: F401
    EigenDAError,
    ConfigError,
    MalformedInputError,
    InvalidIdentifierError,
    TransportError,
    SubmissionError,
    SerializationError,
    PayloadTooLargeError,
    IncompleteConfirmationError,
    UnconfirmedSubmissionError,
    SubmissionTimeoutError,
    RetrievalError,
    DeserializationError,
)

# Building blocks
from .codec import ChunkCodec, decode_chunks, encode_chunks  # noqa: F401
from .identifier import BlobIdentifier  # noqa: F401
from .limits import SizeGuard  # noqa: F401
from .serde import JsonSerializer, PayloadSerializer  # noqa: F401
from .submission import PutOptions, SubmissionController, SubmissionPhase  # noqa: F401
from .retrieval import RetrievalController  # noqa: F401

# Transports
from .transport import (  # noqa: F401
    BlobStatus,
    DisperserTransport,
    HttpDisperserTransport,
    MemoryDisperserTransport,
)

__all__ = [
    "__version__",
    "EigenDAClient",
    "ClientConfig",
    "get_config",
    "EigenDAError",
    "ConfigError",
    "MalformedInputError",
    "InvalidIdentifierError",
    "TransportError",
    "SubmissionError",
    "SerializationError",
    "PayloadTooLargeError",
    "IncompleteConfirmationError",
    "UnconfirmedSubmissionError",
    "SubmissionTimeoutError",
    "RetrievalError",
    "DeserializationError",
    "ChunkCodec",
    "encode_chunks",
    "decode_chunks",
    "BlobIdentifier",
    "SizeGuard",
    "JsonSerializer",
    "PayloadSerializer",
    "PutOptions",
    "SubmissionController",
    "SubmissionPhase",
    "RetrievalController",
    "BlobStatus",
    "DisperserTransport",
    "HttpDisperserTransport",
    "MemoryDisperserTransport",
]
