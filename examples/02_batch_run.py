"""Example: Run two cycles from OP Mainnet to Arbitrum and Ink for every key in account.txt."""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

from multibridge import (
    BridgeLegExecutor,
    BridgeOrchestrator,
    MaxRateDropPolicy,
    PacingConfig,
    RoutingConfig,
    build_run_config,
    load_private_keys,
)
from multibridge.routing import LiFiRoutingProvider
from multibridge.wallet import Web3ClientFactory

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def main() -> None:
    config = build_run_config("2", "3,4", cycles=2, amount="0.002", destination_gas="0.0002")
    secrets = load_private_keys(os.getenv("MULTIBRIDGE_ACCOUNTS", "account.txt"))

    factory = Web3ClientFactory()
    provider = LiFiRoutingProvider(RoutingConfig.from_env(), factory)
    # Reject any mid-route rate update that loses more than 1%
    executor = BridgeLegExecutor(provider, acceptance_policy=MaxRateDropPolicy("0.01"))

    summary = BridgeOrchestrator(config, factory, executor, pacing=PacingConfig(10, 30)).run(
        secrets
    )
    print(f"{summary.succeeded}/{summary.total} legs succeeded")


if __name__ == "__main__":
    main()
