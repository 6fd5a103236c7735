"""
eigenda-store errors.

Typed exception hierarchy with structured metadata, so callers can catch a
specific failure mode or the base `EigenDAError`.

    from eigenda_store.errors import SubmissionError, RetrievalError

    try:
        ident = await client.put({"hello": "world"})
    except SubmissionError as e:
        print(e.code, e.data)

All errors expose:
- .code   : stable machine-readable code (snake_case)
- .data   : optional structured payload (dict-like)
- .to_problem() : RFC 7807-compatible dict, handy for logs and API layers

Any failure of `put` means "not stored"; any failure of `get` means
"not retrieved". The underlying exception, when there is one, is chained as
`__cause__`.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

__all__ = [
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
]


class EigenDAError(Exception):
    """
    Base class for all eigenda-store errors.

    Subclasses set `default_code`.
    """

    default_code = "eigenda_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data: Dict[str, Any] = dict(data) if data else {}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code

    def to_problem(self) -> Dict[str, Any]:
        """
        Render as an RFC 7807 "problem detail" object.
        """
        cause = self.__cause__
        return {
            "type": f"urn:eigenda-store:{self.code}",
            "title": self.code.replace("_", " ").title(),
            "detail": self.message or None,
            "data": self.data or None,
            "cause": f"{cause.__class__.__name__}: {cause}" if cause is not None else None,
        }


class ConfigError(EigenDAError, ValueError):
    """Invalid or unsupported client configuration."""

    default_code = "config_error"


class MalformedInputError(EigenDAError, ValueError):
    """
    Encoded bytes do not follow the 32-byte stride layout.
    """

    default_code = "malformed_input"


class InvalidIdentifierError(EigenDAError, ValueError):
    """A canonical identifier string could not be parsed."""

    default_code = "invalid_identifier"


class TransportError(EigenDAError):
    """
    The disperser could not be reached or answered with something unusable.

    `data["http_status"]` is set when an HTTP response was received.
    """

    default_code = "transport_error"

    @property
    def http_status(self) -> Optional[int]:
        v = self.data.get("http_status")
        return int(v) if v is not None else None


# --------------------------------------------------------------------------- #
# put()
# --------------------------------------------------------------------------- #


class SubmissionError(EigenDAError):
    """Base class for failures of `put`; the payload was not stored."""

    default_code = "submission_failed"


class SerializationError(SubmissionError):
    """The application value could not be serialized to bytes."""

    default_code = "serialization_failed"


class PayloadTooLargeError(SubmissionError):
    """
    Encoded payload exceeds the transport ceiling. Raised before any network
    call is made.
    """

    default_code = "payload_too_large"

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            f"blob too large: encoded size is {size} bytes, must be below {limit} bytes",
            data={"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class IncompleteConfirmationError(SubmissionError):
    """
    Polling stopped without both the blob index and the batch tag having been
    reported by the disperser.
    """

    default_code = "incomplete_confirmation"


class UnconfirmedSubmissionError(SubmissionError):
    """
    Placement was reported but the final status is not CONFIRMED. `status`
    carries the last observed status.
    """

    default_code = "unconfirmed_submission"

    def __init__(self, status: Any, *, request_id: Optional[str] = None) -> None:
        name = getattr(status, "name", str(status))
        super().__init__(
            f"submission ended with status {name}",
            data={"status": int(status), "request_id": request_id},
        )
        self.status = status


class SubmissionTimeoutError(SubmissionError, TimeoutError):
    """`max_timeout_ms` elapsed before the submission resolved."""

    default_code = "submission_timeout"

    def __init__(self, timeout_ms: int, *, request_id: Optional[str] = None) -> None:
        super().__init__(
            f"operation timed out after {timeout_ms} ms",
            data={"timeout_ms": timeout_ms, "request_id": request_id},
        )
        self.timeout_ms = timeout_ms


# --------------------------------------------------------------------------- #
# get()
# --------------------------------------------------------------------------- #


class RetrievalError(EigenDAError):
    """Base class for failures of `get`; nothing usable was retrieved."""

    default_code = "retrieval_failed"


class DeserializationError(RetrievalError):
    """
    Retrieved bytes decode but are not a serialized payload. The identifier
    most likely does not point at data written by `put`.
    """

    default_code = "deserialization_failed"
