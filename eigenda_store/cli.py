"""
eigenda-store: command-line access to the key/value client.

Implements:
  - eigenda-store put [JSON]         Store a JSON document, print its identifier
  - eigenda-store get <identifier>   Print the stored JSON document
  - eigenda-store encode / decode    Run the stride codec on raw bytes
  - eigenda-store config             Show the effective configuration

Global options:
  --verbose / -v   Debug logging on stderr
  --memory         Use an in-process disperser simulator instead of HTTP

Configuration comes from EIGENDA_* environment variables (see
eigenda_store.config).

Examples:
  eigenda-store put '{"hello": "world"}'
  eigenda-store get 5-AQI=
  echo -n hi | eigenda-store encode | xxd
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from .client import EigenDAClient
from .codec import decode_chunks, encode_chunks
from .config import format_config, get_config
from .submission import PutOptions
from .transport.memory import MemoryDisperserTransport

app = typer.Typer(
    name="eigenda-store",
    help="Store and fetch JSON documents on an EigenDA disperser",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalContext:
    def __init__(self) -> None:
        self.verbose: bool = False
        self.memory: bool = False


_ctx = GlobalContext()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    memory: bool = typer.Option(False, "--memory", help="Use the in-process disperser simulator"),
) -> None:
    """
    eigenda-store CLI. Use `<command> --help` for details.
    """
    _ctx.verbose = verbose
    _ctx.memory = memory
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_client() -> EigenDAClient:
    """Client for the current invocation; HTTP unless --memory was given."""
    cfg = get_config()
    if _ctx.memory:
        return EigenDAClient(MemoryDisperserTransport(confirm_after_polls=1), config=cfg)
    return EigenDAClient(config=cfg)


def _read_input(input_file: Optional[Path]) -> bytes:
    if input_file:
        return input_file.read_bytes()
    return sys.stdin.buffer.read()


async def _put(value: Any, options: PutOptions) -> str:
    async with _build_client() as client:
        ident = await client.put(value, options)
    return ident.to_canonical_string()


async def _get(identifier: str) -> Any:
    async with _build_client() as client:
        return await client.get(identifier)


@app.command()
def put(
    document: Optional[str] = typer.Argument(None, help="JSON document (default: --file or stdin)"),
    input_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read the JSON document from a file"),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", help="Give up after this many milliseconds"),
    poll_interval_ms: Optional[int] = typer.Option(None, "--poll-interval-ms", help="Delay between status polls"),
) -> None:
    """
    Store a JSON document and print its identifier.

    Examples:
      eigenda-store put '{"hello": "world"}'
      eigenda-store put --file doc.json --timeout-ms 600000
    """
    try:
        text = document if document is not None else _read_input(input_file).decode("utf-8")
        if not text.strip():
            typer.echo("Error: no JSON document provided", err=True)
            raise typer.Exit(1)
        try:
            value = json.loads(text)
        except ValueError as e:
            typer.echo(f"Error: invalid JSON document: {e}", err=True)
            raise typer.Exit(1)

        options = PutOptions(max_timeout_ms=timeout_ms, poll_interval_ms=poll_interval_ms)
        typer.echo(asyncio.run(_put(value, options)))

    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def get(
    identifier: str = typer.Argument(..., help="Blob identifier, e.g. 5-AQI="),
    output_file: Optional[Path] = typer.Option(None, "--output", "-o", help="Save to file (default: stdout)"),
) -> None:
    """
    Retrieve a stored JSON document.

    Examples:
      eigenda-store get 5-AQI=
      eigenda-store get 5-AQI= --output doc.json
    """
    try:
        value = asyncio.run(_get(identifier))
        text = json.dumps(value, ensure_ascii=False)
        if output_file:
            output_file.write_text(text + "\n", encoding="utf-8")
            typer.echo(f"✓ Document saved to {output_file}")
        else:
            typer.echo(text)

    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def encode(
    input_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Input file (default: read from stdin)"),
) -> None:
    """Stride-encode raw bytes (stdin -> stdout)."""
    try:
        typer.echo(encode_chunks(_read_input(input_file)), nl=False)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def decode(
    input_file: Optional[Path] = typer.Option(None, "--file", "-f", help="Input file (default: read from stdin)"),
) -> None:
    """Decode stride-encoded bytes (stdin -> stdout)."""
    try:
        typer.echo(decode_chunks(_read_input(input_file)), nl=False)
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("config")
def show_config() -> None:
    """Print the effective configuration."""
    try:
        typer.echo(format_config(get_config()))
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the eigenda-store CLI."""
    app()


if __name__ == "__main__":
    main()
