"""Sequential orchestration over wallets, cycles and destination chains."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Sequence
from enum import Enum

from .base import ChainClientFactory, WalletHandle
from .chains import ChainDescriptor
from .config import PacingConfig, RunConfiguration
from .exceptions import CredentialError
from .executor import BridgeLegExecutor, log_header
from .types import LegOutcome, RunSummary
from .utils import random_delay_seconds

logger = logging.getLogger(__name__)


class EngineState(str, Enum):
    IDLE = "idle"
    WALLET = "wallet"
    CYCLE = "cycle"
    LEG = "leg"
    DONE = "done"


class BridgeOrchestrator:
    """Run every (wallet, cycle, destination) leg one after another.

    Each wallet gets one client bound to the source chain, reused for all of
    its legs. A failed leg is logged and skipped; every leg, including the
    last, is followed by a pacing delay.
    """

    def __init__(
        self,
        config: RunConfiguration,
        client_factory: ChainClientFactory,
        executor: BridgeLegExecutor,
        *,
        pacing: PacingConfig | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._executor = executor
        self._pacing = pacing or PacingConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.state = EngineState.IDLE

    @property
    def config(self) -> RunConfiguration:
        return self._config

    def run(self, secrets: Sequence[str]) -> RunSummary:
        if not secrets:
            raise CredentialError("No wallet credentials supplied")

        summary = RunSummary()
        config = self._config
        logger.info(
            "Starting run: %s wallet(s), %s cycle(s), %s leg(s) per wallet, %s → %s",
            len(secrets),
            config.cycles,
            config.legs_per_wallet,
            config.source_chain.name,
            ", ".join(chain.name for chain in config.destination_chains),
        )
        if config.source_reserve > 0:
            logger.debug(
                "Source reserve %s %s is informational; balances are not checked",
                config.source_reserve,
                config.source_chain.native_symbol,
            )
        if config.destination_gas_enabled:
            logger.info(
                "Requesting %s %s of destination gas per leg",
                config.destination_gas,
                config.source_chain.native_symbol,
            )

        for wallet_index, secret in enumerate(secrets, start=1):
            self.state = EngineState.WALLET
            log_header(f"Wallet {wallet_index}")
            handle = self._client_factory.handle(secret, config.source_chain)
            self._run_wallet(wallet_index, handle, summary)
            summary.wallets += 1

        self.state = EngineState.DONE
        logger.info(
            "--- DONE --- %s wallet(s), %s leg(s): %s succeeded, %s failed",
            summary.wallets,
            summary.total,
            summary.succeeded,
            summary.failed,
        )
        return summary

    def _run_wallet(self, wallet_index: int, handle: WalletHandle, summary: RunSummary) -> None:
        cycles = self._config.cycles
        for cycle in range(1, cycles + 1):
            self.state = EngineState.CYCLE
            logger.info("=== Cycle %s/%s ===", cycle, cycles)
            for destination in self._config.destination_chains:
                self.state = EngineState.LEG
                outcome = self._run_leg(wallet_index, cycle, handle, destination)
                summary.record(outcome)
                if not outcome.success:
                    logger.error("❌ Bridge to %s failed: %s", destination.name, outcome.error)
                self.pace()

    def _run_leg(
        self, wallet_index: int, cycle: int, handle: WalletHandle, destination: ChainDescriptor
    ) -> LegOutcome:
        config = self._config
        try:
            return self._executor.run(
                handle,
                destination,
                config.amount,
                config.slippage,
                config.destination_gas,
                cycle=cycle,
                wallet_index=wallet_index,
            )
        except Exception as exc:
            logger.debug("Leg executor raised for %s", destination.name, exc_info=True)
            return LegOutcome(
                success=False,
                destination=destination.name,
                cycle=cycle,
                wallet_index=wallet_index,
                error=str(exc) or repr(exc),
            )

    def pace(self) -> int:
        delay = random_delay_seconds(self._pacing.min_seconds, self._pacing.max_seconds, self._rng)
        logger.info("⏳ Delay %s seconds...", delay)
        self._sleep(delay)
        return delay
