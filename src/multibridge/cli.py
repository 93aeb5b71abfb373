"""Command-line front end for unattended multi-wallet bridging."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence

from dotenv import load_dotenv

from .chains import DEFAULT_REGISTRY, ChainRegistry
from .config import (
    DEFAULT_ACCOUNTS_FILE,
    DEFAULT_AMOUNT,
    DEFAULT_CYCLES,
    DEFAULT_MAX_DELAY,
    DEFAULT_MIN_DELAY,
    DEFAULT_SLIPPAGE,
    DEFAULT_SOURCE_RESERVE,
    ClientConfig,
    PacingConfig,
    RoutingConfig,
    RunConfiguration,
    build_run_config,
    resolve_source,
    rpc_overrides_from_env,
)
from .credentials import load_private_keys
from .engine import BridgeOrchestrator
from .exceptions import ConfigurationError
from .executor import BridgeLegExecutor
from .routing import LiFiRoutingProvider
from .wallet import Web3ClientFactory

logger = logging.getLogger("multibridge")

BANNER = r"""
 __  __       _ _   _ ____       _     _
|  \/  |_   _| | |_(_) __ ) _ __(_) __| | __ _  ___
| |\/| | | | | | __| |  _ \| '__| |/ _` |/ _` |/ _ \
| |  | | |_| | | |_| | |_) | |  | | (_| | (_| |  __/
|_|  |_|\__,_|_|\__|_|____/|_|  |_|\__,_|\__, |\___|
                                         |___/
"""

Prompt = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multibridge",
        description="Bridge native ETH across chains for every wallet in a key file",
    )
    parser.add_argument("--source", help="Source chain selection key (e.g. 2 for OP Mainnet)")
    parser.add_argument(
        "--destinations", help="Comma-separated destination chain keys (e.g. 3,4)"
    )
    parser.add_argument("--cycles", help=f"Passes over the destinations [{DEFAULT_CYCLES}]")
    parser.add_argument("--amount", help=f"ETH bridged per leg [{DEFAULT_AMOUNT}]")
    parser.add_argument(
        "--slippage", help=f"Slippage as a decimal, 0.005 = 0.5%% [{DEFAULT_SLIPPAGE}]"
    )
    parser.add_argument(
        "--reserve", help=f"ETH to keep on the source chain [{DEFAULT_SOURCE_RESERVE}]"
    )
    parser.add_argument(
        "--dest-gas", help="Gas top-up delivered on the destination chain (ETH); omit to disable"
    )
    parser.add_argument(
        "--accounts",
        default=os.getenv("MULTIBRIDGE_ACCOUNTS", DEFAULT_ACCOUNTS_FILE),
        help="File with one private key per line",
    )
    parser.add_argument("--min-delay", type=int, default=DEFAULT_MIN_DELAY)
    parser.add_argument("--max-delay", type=int, default=DEFAULT_MAX_DELAY)
    parser.add_argument("--no-banner", action="store_true", help="Skip the startup banner")
    return parser


def prompt_run_config(
    args: argparse.Namespace,
    registry: ChainRegistry = DEFAULT_REGISTRY,
    prompt: Prompt = input,
    *,
    interactive: bool = True,
) -> RunConfiguration:
    """Fill in missing run parameters interactively, then validate them."""

    def ask(value, question: str, default):
        if value is not None:
            return value
        if not interactive:
            return default
        answer = prompt(f"{question} [default {default}]: ").strip()
        return answer or default

    source = args.source
    if source is None:
        print("Select the SOURCE chain (one choice):")
        for chain in registry:
            print(f"  {chain.key}) {chain.name} ({chain.chain_id})")
        source = prompt("Enter one key (e.g. 2 for OP Mainnet): ").strip()
    source_chain = resolve_source(source, registry)

    destinations = args.destinations
    if destinations is None:
        print("\nSelect DESTINATION chains (comma-separated):")
        print(f"  {registry.describe()}")
        destinations = prompt("Enter keys (e.g. 4, or 3,4): ").strip()

    cycles = ask(args.cycles, "\nHow many cycles?", DEFAULT_CYCLES)
    amount = ask(args.amount, "\nAmount (ETH) to bridge per leg?", DEFAULT_AMOUNT)
    slippage = ask(args.slippage, "Slippage (decimal, 0.005=0.5%)?", DEFAULT_SLIPPAGE)
    reserve = ask(
        args.reserve, f"ETH reserve on {source_chain.name} (gas)?", DEFAULT_SOURCE_RESERVE
    )

    destination_gas = args.dest_gas
    if destination_gas is None and interactive:
        answer = prompt("Send gas to the destination chain? [y/N]: ").strip().lower()
        if answer in ("y", "yes"):
            destination_gas = prompt("Destination gas amount (ETH) [e.g. 0.0002]: ").strip() or "0"

    return build_run_config(
        source,
        destinations,
        cycles=cycles,
        amount=amount,
        slippage=slippage,
        source_reserve=reserve,
        destination_gas=destination_gas,
        registry=registry,
    )


def configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOGLEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    configure_logging()

    args = build_parser().parse_args(argv)
    missing = args.source is None or args.destinations is None
    interactive = missing and sys.stdin.isatty()

    if not args.no_banner:
        print(BANNER)

    registry = DEFAULT_REGISTRY.with_rpc_overrides(rpc_overrides_from_env(DEFAULT_REGISTRY))

    try:
        if missing and not interactive:
            raise ConfigurationError("--source and --destinations are required when not on a TTY")
        run_config = prompt_run_config(args, registry, interactive=interactive)
        pacing = PacingConfig(args.min_delay, args.max_delay)
        secrets = load_private_keys(args.accounts)
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return 2

    client_factory = Web3ClientFactory(ClientConfig(), registry)
    provider = LiFiRoutingProvider(RoutingConfig.from_env(registry), client_factory)
    orchestrator = BridgeOrchestrator(
        run_config,
        client_factory,
        BridgeLegExecutor(provider),
        pacing=pacing,
    )

    try:
        orchestrator.run(secrets)
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
