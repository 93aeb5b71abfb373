"""Example: Quote and execute one native ETH bridge with a single wallet."""

from __future__ import annotations

import logging
import os
from decimal import Decimal

from dotenv import load_dotenv

from multibridge import (
    DEFAULT_REGISTRY,
    BridgeLegExecutor,
    RoutingConfig,
)
from multibridge.routing import LiFiRoutingProvider
from multibridge.wallet import Web3ClientFactory

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOGLEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger("single_bridge")


def _require_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ValueError(f"{name} not found in environment variables")
    return value


def main() -> None:
    private_key = _require_env("PRIVATE_KEY")
    source = DEFAULT_REGISTRY.require_id(int(os.getenv("SOURCE_CHAIN_ID", "10")))
    destination = DEFAULT_REGISTRY.require_id(int(os.getenv("DEST_CHAIN_ID", "42161")))
    amount = Decimal(os.getenv("BRIDGE_AMOUNT_ETH", "0.001"))

    factory = Web3ClientFactory()
    provider = LiFiRoutingProvider(RoutingConfig.from_env(), factory)
    executor = BridgeLegExecutor(provider)

    handle = factory.handle(private_key, source)
    outcome = executor.run(handle, destination, amount, Decimal("0.005"))
    outcome.raise_for_failure()
    logger.info("Bridge succeeded: %s", ", ".join(outcome.tx_hashes))


if __name__ == "__main__":
    main()
