import os

import pytest
from prometheus_client import CollectorRegistry

from eigenda_store.config import ClientConfig, get_config
from eigenda_store.metrics import ClientMetrics
from eigenda_store.transport.memory import MemoryDisperserTransport


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """
    Tests never see EIGENDA_* variables from the developer's shell, and the
    cached config is rebuilt per test.
    """
    for name in list(os.environ):
        if name.startswith("EIGENDA_"):
            monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def fast_config() -> ClientConfig:
    """Defaults with a short poll interval so polling tests finish quickly."""
    return ClientConfig(poll_interval_ms=5)


@pytest.fixture
def memory_transport() -> MemoryDisperserTransport:
    return MemoryDisperserTransport(confirm_after_polls=2, start_index=5, batch_tag=b"\x01\x02")


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry) -> ClientMetrics:
    return ClientMetrics(registry=registry)
