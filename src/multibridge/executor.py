"""Execution of a single bridge leg."""

from __future__ import annotations

import logging
from decimal import Decimal

from .base import AcceptancePolicy, RoutingProvider, WalletHandle
from .chains import ChainDescriptor
from .exceptions import BridgeError
from .policies import AlwaysAccept
from .types import LegOutcome, StepEvent, TransferIntent
from .utils import to_wei

logger = logging.getLogger(__name__)

HEADER_WIDTH = 70


def log_header(title: str) -> None:
    logger.info("-" * HEADER_WIDTH)
    logger.info(title)
    logger.info("-" * HEADER_WIDTH)


class BridgeLegExecutor:
    """Quote, route and execute one (wallet, destination) transfer.

    Failures during quoting or execution are returned as a failed
    LegOutcome; nothing leg-scoped is raised to the caller.
    """

    def __init__(
        self,
        provider: RoutingProvider,
        *,
        acceptance_policy: AcceptancePolicy | None = None,
    ) -> None:
        self._provider = provider
        self._acceptance_policy = acceptance_policy or AlwaysAccept()

    def build_intent(
        self,
        address: str,
        source: ChainDescriptor,
        destination: ChainDescriptor,
        amount: Decimal,
        slippage: Decimal,
        destination_gas: Decimal = Decimal("0"),
    ) -> TransferIntent:
        gas_wei = to_wei(destination_gas) if destination_gas > 0 else None
        return TransferIntent(
            from_chain=source.chain_id,
            to_chain=destination.chain_id,
            from_address=address,
            to_address=address,
            from_amount=to_wei(amount),
            slippage=float(slippage),
            from_amount_for_gas=gas_wei,
        )

    def run(
        self,
        handle: WalletHandle,
        destination: ChainDescriptor,
        amount: Decimal,
        slippage: Decimal,
        destination_gas: Decimal = Decimal("0"),
        *,
        cycle: int = 0,
        wallet_index: int = 0,
    ) -> LegOutcome:
        source = handle.client.chain
        address = handle.address
        log_header(f"[{address}] Bridge {amount} ETH | {source.name} → {destination.name}")

        tx_hashes: list[str] = []

        def on_progress(event: StepEvent) -> None:
            for line in event.format_lines():
                logger.info(line)
            if event.tx_hash and event.tx_hash not in tx_hashes:
                tx_hashes.append(event.tx_hash)

        try:
            intent = self.build_intent(
                address, source, destination, amount, slippage, destination_gas
            )
            route = self._provider.quote(intent)
            self._provider.execute(
                route,
                handle,
                on_progress=on_progress,
                on_rate_update=self._acceptance_policy,
            )
        except (BridgeError, TimeoutError) as exc:
            return self._failed(destination, cycle, wallet_index, str(exc), tx_hashes)
        except Exception as exc:
            logger.debug("Unexpected error bridging to %s", destination.name, exc_info=True)
            return self._failed(destination, cycle, wallet_index, str(exc) or repr(exc), tx_hashes)

        logger.info("✅ Done: %s ETH %s → %s", amount, source.name, destination.name)
        return LegOutcome(
            success=True,
            destination=destination.name,
            cycle=cycle,
            wallet_index=wallet_index,
            tx_hashes=tuple(tx_hashes),
        )

    def _failed(
        self,
        destination: ChainDescriptor,
        cycle: int,
        wallet_index: int,
        reason: str,
        tx_hashes: list[str],
    ) -> LegOutcome:
        return LegOutcome(
            success=False,
            destination=destination.name,
            cycle=cycle,
            wallet_index=wallet_index,
            error=reason,
            tx_hashes=tuple(tx_hashes),
        )
