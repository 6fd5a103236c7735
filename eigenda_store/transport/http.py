"""
eigenda_store.transport.http
============================

Async HTTP transport for the disperser's JSON gateway.

Endpoints (conventions)
-----------------------
- POST {base}/disperser/v1/blobs
    Body: {"data": "<base64>", "accountId": "<str>"}
    Returns: {"requestId": "<base64>", "result": <status>}

- GET  {base}/disperser/v1/blobs/status?requestId=<base64>
    Returns:
      {
        "status": <status>,
        "info": {                              # optional, once placed
          "blobVerificationProof": {
            "blobIndex": 5,
            "batchMetadata": {"batchHeaderHash": "<base64>"}
          }
        }
      }

- GET  {base}/disperser/v1/blobs?blobIndex=<int>&batchHeaderHash=<base64>
    Returns: {"data": "<base64>"}

`<status>` may be the numeric code or the enum name; see BlobStatus.parse.

Usage
-----
    async with HttpDisperserTransport("http://127.0.0.1:5001") as transport:
        reply = await transport.disperse(encoded)

Every failure (connection error, timeout, non-2xx, malformed body) surfaces
as TransportError with the original exception chained. There are no retries
at this layer.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..errors import TransportError
from ..version import user_agent
from .base import BlobStatus, DisperseReply, StatusReply

log = logging.getLogger(__name__)

JsonDict = Dict[str, Any]

_DISPERSE_PATH = "/disperser/v1/blobs"
_STATUS_PATH = "/disperser/v1/blobs/status"
_RETRIEVE_PATH = "/disperser/v1/blobs"


def _b64(data: bytes) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def _unb64(value: Any, *, field: str) -> bytes:
    if not isinstance(value, str):
        raise TransportError(f"field {field!r} must be a base64 string", data={"field": field})
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TransportError(f"field {field!r} is not valid base64", data={"field": field}) from e


def _dig(obj: Any, *keys: str) -> Any:
    for k in keys:
        if not isinstance(obj, Mapping):
            return None
        obj = obj.get(k)
    return obj


class HttpDisperserTransport:
    """
    Disperser transport over HTTP/JSON.

    Parameters
    ----------
    base_url : str
        Gateway base URL, e.g. "https://disperser-holesky.eigenda.xyz:443".
    account_id : str
        Account identifier sent with each dispersal.
    timeout_s : float
        Per-request timeout.
    headers : Mapping[str, str] | None
        Extra headers merged over the defaults.
    client : httpx.AsyncClient | None
        Injected client (not closed by `aclose`). When omitted one is created
        and owned by the transport.
    """

    def __init__(
        self,
        base_url: str,
        *,
        account_id: str = "eigenda-store-py",
        timeout_s: float = 30.0,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.account_id = account_id
        hdrs = {"Accept": "application/json", "User-Agent": user_agent()}
        if headers:
            hdrs.update(dict(headers))
        self._own_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, headers=hdrs, timeout=float(timeout_s))

    # --- context management

    async def aclose(self) -> None:
        if self._own_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpDisperserTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    # --- DisperserTransport

    async def disperse(self, data: bytes) -> DisperseReply:
        body = {"data": _b64(data), "accountId": self.account_id}
        payload = await self._request("POST", _DISPERSE_PATH, json=body)
        request_id = _unb64(payload.get("requestId"), field="requestId")
        status = BlobStatus.parse(payload.get("result"))
        log.debug("dispersed %d bytes: request_id=%s status=%s", len(data), _b64(request_id), status.name)
        return DisperseReply(request_id=request_id, status=status)

    async def poll_status(self, request_id: bytes) -> StatusReply:
        payload = await self._request("GET", _STATUS_PATH, params={"requestId": _b64(request_id)})
        status = BlobStatus.parse(payload.get("status"))
        proof = _dig(payload, "info", "blobVerificationProof")

        index: Optional[int] = None
        raw_index = _dig(proof, "blobIndex")
        if raw_index is not None:
            try:
                index = int(raw_index)
            except (TypeError, ValueError) as e:
                raise TransportError(f"blobIndex is not an integer: {raw_index!r}") from e

        tag: Optional[bytes] = None
        raw_tag = _dig(proof, "batchMetadata", "batchHeaderHash")
        if raw_tag is not None:
            tag = _unb64(raw_tag, field="batchHeaderHash")

        return StatusReply(status=status, blob_index=index, batch_tag=tag)

    async def retrieve(self, index: int, batch_tag: bytes) -> bytes:
        params = {"blobIndex": str(int(index)), "batchHeaderHash": _b64(batch_tag)}
        payload = await self._request("GET", _RETRIEVE_PATH, params=params)
        return _unb64(payload.get("data"), field="data")

    # --- internals

    async def _request(self, method: str, path: str, **kwargs: Any) -> JsonDict:
        try:
            resp = await self._client.request(method, self.base_url + path, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if resp.status_code // 100 != 2:
            detail: Any
            try:
                detail = resp.json()
            except ValueError:
                detail = resp.text[:256]
            raise TransportError(
                f"{method} {path} -> HTTP {resp.status_code}: {detail}",
                data={"http_status": resp.status_code},
            )
        try:
            payload = resp.json()
        except ValueError as e:
            raise TransportError(f"{method} {path}: expected JSON response") from e
        if not isinstance(payload, dict):
            raise TransportError(f"{method} {path}: expected a JSON object, got {type(payload).__name__}")
        return payload


__all__ = ["HttpDisperserTransport"]
