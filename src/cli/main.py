"""Sluice CLI entry points.
This module exposes commands for serving, foreground ingest, and listing.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import json
from typing import Any, Awaitable, Callable, Sequence

from core.config import SluiceConfig
from core.constants import MAX_LIST_LIMIT
from core.types import RunStatus
from store.client_sdk import SluiceClient
from store.record_payload import record_to_document

ClientFactory = Callable[[SluiceConfig], SluiceClient]


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="sluice", description="Sluice bulk CSV ingest CLI")
    parser.add_argument("--mongo-uri", help="Override SLUICE_MONGO_URI for this command")
    parser.add_argument("--batch-size", type=int, help="Override SLUICE_BATCH_SIZE")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_serve_command(subparsers)
    _add_ingest_command(subparsers)
    _add_records_command(subparsers)
    _add_init_indexes_command(subparsers)
    return parser


def main(
    argv: Sequence[str] | None = None,
    client_factory: ClientFactory = SluiceClient,
) -> int:
    """Run the Sluice CLI.

    Args:
        argv: Optional argument vector.
        client_factory: Builds the SDK client from resolved config.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args, parser)
    if args.command == "serve":
        return _run_serve_command(config, args)
    if args.command == "ingest":
        return _run_with_client(client_factory(config), _ingest_command(args))
    if args.command == "records":
        return _run_with_client(client_factory(config), _records_command(args))
    if args.command == "init-indexes":
        return _run_with_client(client_factory(config), _init_indexes_command)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace, parser: argparse.ArgumentParser) -> SluiceConfig:
    """Build config with optional command-line overrides."""
    config = SluiceConfig.from_env()
    if args.mongo_uri:
        config = replace(config, mongo_uri=args.mongo_uri)
    if args.batch_size is not None:
        if args.batch_size < 1:
            parser.error("--batch-size must be >= 1")
        config = replace(config, batch_size=args.batch_size)
    return config


def _run_with_client(
    client: SluiceClient,
    command: Callable[[SluiceClient], Awaitable[int]],
) -> int:
    """Run one async command and always close the client."""

    async def _execute() -> int:
        try:
            return await command(client)
        finally:
            await client.close()

    return asyncio.run(_execute())


def _run_serve_command(config: SluiceConfig, args: argparse.Namespace) -> int:
    """Handle serve command."""
    import uvicorn

    from api.app import create_app

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


def _ingest_command(args: argparse.Namespace) -> Callable[[SluiceClient], Awaitable[int]]:
    """Build the ingest command handler."""

    async def _handle(client: SluiceClient) -> int:
        ingestion_run = await client.ingest(args.source)
        print(f"run_id={ingestion_run.run_id}")
        print(f"status={ingestion_run.status.value}")
        print(f"total_records={ingestion_run.total_records}")
        print(f"processed_records={ingestion_run.processed_records}")
        print(f"elapsed_seconds={ingestion_run.elapsed_seconds:.3f}")
        if ingestion_run.error:
            print(f"error={ingestion_run.error}")
        return 0 if ingestion_run.status is RunStatus.COMPLETED else 1

    return _handle


def _records_command(args: argparse.Namespace) -> Callable[[SluiceClient], Awaitable[int]]:
    """Build the records listing command handler."""

    async def _handle(client: SluiceClient) -> int:
        for record in await client.sample_records(args.limit):
            print(json.dumps(record_to_document(record), sort_keys=True))
        return 0

    return _handle


async def _init_indexes_command(client: SluiceClient) -> int:
    await client.ensure_indexes()
    print("indexes_ready")
    return 0


def _add_serve_command(subparsers: Any) -> None:
    """Register serve subcommand."""
    parser = subparsers.add_parser("serve", help="Run the HTTP upload service")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")


def _add_ingest_command(subparsers: Any) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser("ingest", help="Ingest a local CSV file in the foreground")
    parser.add_argument("source", help="CSV file path; the original file is kept")


def _add_records_command(subparsers: Any) -> None:
    """Register records subcommand."""
    parser = subparsers.add_parser("records", help="Print a sample of stored records")
    parser.add_argument(
        "--limit",
        type=_bounded_limit,
        help=f"Maximum records to print (1-{MAX_LIST_LIMIT})",
    )


def _add_init_indexes_command(subparsers: Any) -> None:
    """Register init-indexes subcommand."""
    subparsers.add_parser("init-indexes", help="Create the unique record id index")


def _bounded_limit(raw_value: str) -> int:
    """Parse a listing limit within the supported range."""
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected integer, got '{raw_value}'") from error
    if not 1 <= value <= MAX_LIST_LIMIT:
        raise argparse.ArgumentTypeError(f"expected 1-{MAX_LIST_LIMIT}, got {value}")
    return value
