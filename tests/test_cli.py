"""
CLI tests for eigenda-store, driven through typer's CliRunner.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer.testing

from eigenda_store import cli
from eigenda_store.cli import app
from eigenda_store.client import EigenDAClient
from eigenda_store.codec import encode_chunks
from eigenda_store.config import ClientConfig
from eigenda_store.identifier import BlobIdentifier
from eigenda_store.transport import MemoryDisperserTransport

runner = typer.testing.CliRunner()


@pytest.fixture
def shared_transport(monkeypatch) -> MemoryDisperserTransport:
    """Route every CLI invocation to one in-memory disperser."""
    transport = MemoryDisperserTransport(confirm_after_polls=2, start_index=5, batch_tag=b"\x01\x02")
    monkeypatch.setattr(
        cli,
        "_build_client",
        lambda: EigenDAClient(transport, config=ClientConfig(poll_interval_ms=1)),
    )
    return transport


class TestCLIBasics:
    def test_help(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("put", "get", "encode", "decode", "config"):
            assert command in result.stdout

    def test_config_command(self, monkeypatch) -> None:
        monkeypatch.setenv("EIGENDA_ACCOUNT_ID", "cli-test")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "account_id: cli-test" in result.stdout
        assert "max_timeout_ms: unbounded" in result.stdout

    def test_config_command_reports_invalid_env(self, monkeypatch) -> None:
        monkeypatch.setenv("EIGENDA_POLL_INTERVAL_MS", "never")
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestPutGet:
    def test_put_prints_identifier_and_get_returns_document(self, shared_transport) -> None:
        result = runner.invoke(app, ["put", '{"hello": "world"}'])
        assert result.exit_code == 0, result.output
        assert result.stdout.strip() == "5-AQI="

        result = runner.invoke(app, ["get", "5-AQI="])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout) == {"hello": "world"}

    def test_put_reads_stdin(self, shared_transport) -> None:
        result = runner.invoke(app, ["put"], input="[1, 2, 3]")
        assert result.exit_code == 0, result.output
        ident = BlobIdentifier.from_canonical_string(result.stdout.strip())
        assert ident.index == 5

    def test_put_reads_file(self, shared_transport, tmp_path: Path) -> None:
        doc = tmp_path / "doc.json"
        doc.write_text('{"from": "file"}', encoding="utf-8")
        result = runner.invoke(app, ["put", "--file", str(doc)])
        assert result.exit_code == 0, result.output

        out = tmp_path / "out.json"
        result = runner.invoke(app, ["get", result.stdout.strip(), "--output", str(out)])
        assert result.exit_code == 0, result.output
        assert json.loads(out.read_text(encoding="utf-8")) == {"from": "file"}

    def test_put_rejects_invalid_json(self, shared_transport) -> None:
        result = runner.invoke(app, ["put", "{not json"])
        assert result.exit_code == 1
        assert "invalid JSON" in result.output
        assert shared_transport.calls == []

    def test_put_rejects_empty_input(self, shared_transport) -> None:
        result = runner.invoke(app, ["put"], input="")
        assert result.exit_code == 1
        assert "no JSON document" in result.output

    def test_put_timeout(self, monkeypatch) -> None:
        transport = MemoryDisperserTransport(confirm_after_polls=None)
        monkeypatch.setattr(
            cli,
            "_build_client",
            lambda: EigenDAClient(transport, config=ClientConfig(poll_interval_ms=5)),
        )
        result = runner.invoke(app, ["put", "1", "--timeout-ms", "30"])
        assert result.exit_code == 1
        assert "timed out" in result.output

    def test_get_rejects_malformed_identifier(self, shared_transport) -> None:
        result = runner.invoke(app, ["get", "five-AQI="])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_get_unknown_blob(self, shared_transport) -> None:
        result = runner.invoke(app, ["get", "99-AQI="])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_memory_mode_without_patching(self, monkeypatch) -> None:
        monkeypatch.setenv("EIGENDA_POLL_INTERVAL_MS", "1")
        result = runner.invoke(app, ["--memory", "put", '{"k": 1}'])
        assert result.exit_code == 0, result.output
        assert BlobIdentifier.from_canonical_string(result.stdout.strip()).index == 0

    def test_mainnet_is_refused(self, monkeypatch) -> None:
        monkeypatch.setenv("EIGENDA_NETWORK", "mainnet")
        result = runner.invoke(app, ["--memory", "put", "{}"])
        assert result.exit_code == 1
        assert "mainnet" in result.output


class TestCodecCommands:
    def test_encode_stdin(self) -> None:
        result = runner.invoke(app, ["encode"], input=b"hi")
        assert result.exit_code == 0
        assert result.stdout_bytes == b"\x00hi" + b"\x00" * 29

    def test_decode_file(self, tmp_path: Path) -> None:
        blob = tmp_path / "blob.bin"
        blob.write_bytes(encode_chunks(b"payload"))
        result = runner.invoke(app, ["decode", "--file", str(blob)])
        assert result.exit_code == 0
        assert result.stdout_bytes == b"payload"

    def test_decode_rejects_partial_stride(self) -> None:
        result = runner.invoke(app, ["decode"], input=b"\x00" * 33)
        assert result.exit_code == 1
        assert "multiple of 32" in result.output
