"""
Client configuration: disperser endpoint, size ceiling, polling and timeouts.

- Loads sane defaults and supports overrides via environment variables (EIGENDA_*).
- All fields can also be set directly or through `ClientConfig.with_overrides`.

Environment variables (all optional):

  EIGENDA_DISPERSER_URL=https://disperser-holesky.eigenda.xyz:443
  EIGENDA_NETWORK=testnet               # testnet | mainnet (mainnet is rejected)
  EIGENDA_ACCOUNT_ID=eigenda-store-py
  EIGENDA_MAX_PAYLOAD=2MiB              # bytes; KiB/MiB/KB/MB suffixes accepted
  EIGENDA_POLL_INTERVAL_MS=1000
  EIGENDA_MAX_TIMEOUT_MS=               # unset/empty = wait without bound
  EIGENDA_REQUEST_TIMEOUT=30            # seconds, per HTTP request
  EIGENDA_USER_AGENT=eigenda-store-py/<version>
"""

from __future__ import annotations

import os
import re
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .limits import DEFAULT_MAX_PAYLOAD_BYTES
from .version import user_agent

DEFAULT_DISPERSER_URL = "https://disperser-holesky.eigenda.xyz:443"
DEFAULT_ACCOUNT_ID = "eigenda-store-py"
DEFAULT_POLL_INTERVAL_MS = 1000

NETWORKS = ("testnet", "mainnet")

_SIZE_RE = re.compile(
    r"^\s*(?P<num>\d+(?:\.\d+)?)\s*(?P<unit>bytes?|b|kb|kib|mb|mib)?\s*$",
    re.IGNORECASE,
)
_UNITS = {
    "b": 1,
    "byte": 1,
    "bytes": 1,
    "kb": 1000,
    "kib": 1024,
    "mb": 1000**2,
    "mib": 1024**2,
}


def parse_size(value: str) -> int:
    """Parse human sizes like '4096', '512KiB', '2MiB' → bytes."""
    m = _SIZE_RE.match(value or "")
    if not m:
        raise ConfigError(f"invalid size: {value!r}")
    unit = (m.group("unit") or "b").lower()
    return int(float(m.group("num")) * _UNITS[unit])


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None and v.strip() != "" else default


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(v, 10)
    except ValueError as e:
        raise ConfigError(f"invalid int for {name}: {v!r}") from e


def _env_float(name: str, default: float) -> float:
    v = _env(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError as e:
        raise ConfigError(f"invalid float for {name}: {v!r}") from e


@dataclass(slots=True)
class ClientConfig:
    disperser_url: str = DEFAULT_DISPERSER_URL
    network: str = "testnet"
    account_id: str = DEFAULT_ACCOUNT_ID
    max_payload_bytes: int = DEFAULT_MAX_PAYLOAD_BYTES
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    max_timeout_ms: Optional[int] = None
    request_timeout: float = 30.0
    user_agent: str = field(default_factory=user_agent)

    def validate(self) -> None:
        if not self.disperser_url.lower().startswith(("http://", "https://")):
            raise ConfigError(f"disperser_url must start with http:// or https://, got {self.disperser_url!r}")
        if self.network not in NETWORKS:
            raise ConfigError(f"network must be one of {NETWORKS}, got {self.network!r}")
        if self.max_payload_bytes <= 0:
            raise ConfigError("max_payload_bytes must be > 0")
        if self.poll_interval_ms <= 0:
            raise ConfigError("poll_interval_ms must be > 0")
        if self.max_timeout_ms is not None and self.max_timeout_ms <= 0:
            raise ConfigError("max_timeout_ms must be > 0 when set")
        if self.request_timeout <= 0:
            raise ConfigError("request_timeout must be > 0")

    @classmethod
    def from_env(cls, prefix: str = "EIGENDA_") -> "ClientConfig":
        max_payload = _env(f"{prefix}MAX_PAYLOAD")
        cfg = cls(
            disperser_url=_env(f"{prefix}DISPERSER_URL", DEFAULT_DISPERSER_URL) or DEFAULT_DISPERSER_URL,
            network=(_env(f"{prefix}NETWORK", "testnet") or "testnet").lower(),
            account_id=_env(f"{prefix}ACCOUNT_ID", DEFAULT_ACCOUNT_ID) or DEFAULT_ACCOUNT_ID,
            max_payload_bytes=parse_size(max_payload) if max_payload else DEFAULT_MAX_PAYLOAD_BYTES,
            poll_interval_ms=_env_int(f"{prefix}POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
            max_timeout_ms=_env_int(f"{prefix}MAX_TIMEOUT_MS", None),
            request_timeout=_env_float(f"{prefix}REQUEST_TIMEOUT", 30.0),
            user_agent=_env(f"{prefix}USER_AGENT", user_agent()) or user_agent(),
        )
        cfg.validate()
        return cfg

    @classmethod
    def with_overrides(cls, base: Optional["ClientConfig"] = None, **overrides: Any) -> "ClientConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        cfg = cls(**data)
        cfg.validate()
        return cfg

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@lru_cache(maxsize=1)
def get_config() -> ClientConfig:
    """
    Load and validate configuration from the environment (cached). Clear the
    cache in tests via `get_config.cache_clear()` to observe env changes.
    """
    return ClientConfig.from_env()


def format_config(cfg: Optional[ClientConfig] = None) -> str:
    cfg = cfg or get_config()
    lines: List[str] = []
    for k, v in cfg.to_dict().items():
        if k == "max_timeout_ms" and v is None:
            v = "unbounded"
        lines.append(f"{k}: {v}")
    return "\n".join(lines)


__all__ = [
    "DEFAULT_DISPERSER_URL",
    "DEFAULT_ACCOUNT_ID",
    "DEFAULT_POLL_INTERVAL_MS",
    "NETWORKS",
    "ClientConfig",
    "parse_size",
    "get_config",
    "format_config",
]
