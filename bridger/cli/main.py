"""CLI entrypoint for the Across bridge automation."""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount

import bridger
from bridger.config import BridgeConfig, ConfigError, load_config
from bridger.core.across import AcrossClient
from bridger.core.orchestrator import BridgeRunner
from bridger.core.routes import (
    NotSupportedError,
    chain_name,
    describe_operation,
    list_routes,
    resolve_decimals,
    resolve_token_address,
    supported_chains,
    supported_tokens_for_chain,
)
from bridger.core.utils import get_logger

LOGGER = get_logger("bridger.cli")

ROUTE_PREVIEW_LIMIT = 5


def load_account(private_key: str) -> LocalAccount:
    """Derive the signing account, accepting keys with or without ``0x``."""
    key = private_key.strip()
    if not key.startswith("0x"):
        key = f"0x{key}"
    return Account.from_key(key)


def print_routes(config: BridgeConfig, symbol: str, limit: Optional[int] = None) -> None:
    routes = list_routes(config, symbol)
    if not routes:
        print(f"No routes configured for {symbol}")
        return
    shown = routes[:limit] if limit else routes
    for route in shown:
        print(
            f"- {chain_name(config, route.origin_chain_id)} -> "
            f"{chain_name(config, route.destination_chain_id)}: {route.input_token} -> {route.output_token}"
        )
    if limit and len(routes) > limit:
        print(f"  ... and {len(routes) - limit} more routes")


def print_config_report(config: BridgeConfig) -> None:
    """Print chains, tokens, sample routes and operation descriptions."""
    print("Supported chains:")
    for chain_id in supported_chains(config):
        chain = config.chains[chain_id]
        print(f"- {chain.name} ({chain_id})")
        if chain.spoke_pool:
            print(f"  Spoke Pool: {chain.spoke_pool}")

    print("\nSupported tokens per chain:")
    for chain_id in supported_chains(config):
        print(f"\n{chain_name(config, chain_id)}:")
        for symbol in supported_tokens_for_chain(config, chain_id):
            address = resolve_token_address(config, symbol, chain_id)
            print(f"- {symbol}: {address} ({resolve_decimals(config, symbol)} decimals)")
            bridged = resolve_token_address(config, symbol, chain_id, use_bridged=True)
            if bridged != address:
                print(f"  Bridged version: {bridged}")

    print("\nAvailable routes:")
    for symbol in config.tokens:
        print(f"\nRoutes for {symbol}:")
        print_routes(config, symbol, limit=ROUTE_PREVIEW_LIMIT)

    print("\nBridge operations:")
    for operation in config.operations:
        try:
            state = "enabled" if operation.enabled else "disabled"
            print(f"- {operation.name} [{state}]: {describe_operation(config, operation)}")
            input_token = resolve_token_address(config, operation.token_symbol, operation.origin_chain_id)
            output_token = resolve_token_address(
                config,
                operation.token_symbol,
                operation.destination_chain_id,
                use_bridged=operation.use_bridged,
            )
            print(f"  Route input token: {input_token}")
            print(f"  Route output token: {output_token}")
        except NotSupportedError as exc:
            print(f"- {operation.name}: error: {exc}")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Quote and execute Across bridge operations")
    parser.add_argument("--version", action="version", version=f"%(prog)s {bridger.__version__}")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("BRIDGER_CONFIG", "config.json")),
        help="Path to the JSON configuration file",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--dry-run", action="store_true", help="Quote and check thresholds without executing")
    group.add_argument("--check-config", action="store_true", help="Print the configured chains, tokens and routes")
    group.add_argument("--routes", metavar="SYMBOL", help="List available routes for a token")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    # .env may set BRIDGER_CONFIG, which is the --config default
    load_dotenv(find_dotenv(usecwd=True))
    args = _parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        LOGGER.error("Invalid configuration: %s", exc)
        sys.exit(1)

    if args.check_config:
        print_config_report(config)
        return
    if args.routes:
        print_routes(config, args.routes)
        return

    private_key = (os.getenv("PRIVATE_KEY") or "").strip()
    if not private_key:
        LOGGER.error("PRIVATE_KEY environment variable is required")
        sys.exit(1)

    if args.dry_run:
        config = dataclasses.replace(config, options=dataclasses.replace(config.options, auto_execute=False))

    try:
        account = load_account(private_key)
        LOGGER.info("Starting Across Bridge Automation")
        LOGGER.info("Using account: %s", account.address)

        client = AcrossClient(config=config, account=account)
        BridgeRunner(config=config, client=client, session=client.session).run()
    except Exception as exc:
        LOGGER.exception("Fatal error: %s", exc)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
