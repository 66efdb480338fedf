"""CLI for agentnet."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from .config import Settings
from .registry import RegistryError, fetch_registry_records
from .rpc import JsonRpcClient
from .service import build_aggregator, build_snapshot_cache


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="agentnet")
    parser.add_argument("--verbose", action="store_true", help="Log progress to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True)

    registry_parser = subparsers.add_parser("registry", help="List agents registered on-chain")
    registry_parser.add_argument("--rpc-url", help="Override RPC endpoint URL")
    registry_parser.add_argument("--address", help="Override registry contract address")
    registry_parser.add_argument("--json", action="store_true", help="Print as JSON")

    snapshot_parser = subparsers.add_parser("snapshot", help="Print the aggregated network snapshot")
    snapshot_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Build a fresh snapshot without reading or writing the cache",
    )

    return parser


def _registry(args: argparse.Namespace, settings: Settings) -> int:
    rpc = JsonRpcClient(args.rpc_url or settings.rpc_url, timeout=settings.http_timeout)
    try:
        records = fetch_registry_records(rpc, args.address or settings.registry_address)
    except RegistryError as exc:
        print(f"error: {exc}")
        return 1
    if args.json:
        print(json.dumps([asdict(record) for record in records], indent=2))
        return 0
    for record in records:
        print(f"{record.wallet}  {record.name}  {record.repo_url}  last_seen={record.last_seen}")
    return 0


def _snapshot(args: argparse.Namespace, settings: Settings) -> int:
    if args.no_cache:
        body = build_aggregator(settings).build_snapshot().to_json()
    else:
        body = build_snapshot_cache(settings).get_or_build().body
    print(body)
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    settings = Settings.from_env()

    if args.command == "registry":
        return _registry(args, settings)
    if args.command == "snapshot":
        return _snapshot(args, settings)

    parser.error("Unknown command")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
