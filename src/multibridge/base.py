"""Collaborator interfaces consumed by the orchestration engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .chains import ChainDescriptor
from .types import Route, StepEvent, TransferIntent

ProgressCallback = Callable[[StepEvent], None]
RateUpdateCallback = Callable[[int, int], bool]


class ChainClient(ABC):
    """Signing capability bound to one (secret, chain) pair."""

    @property
    @abstractmethod
    def address(self) -> str:
        pass

    @property
    @abstractmethod
    def chain(self) -> ChainDescriptor:
        pass

    @abstractmethod
    def send_transaction(self, tx_request: Mapping[str, Any]) -> str:
        """Sign and submit a transaction request, returning its 0x hash."""
        pass

    @abstractmethod
    def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        pass


@dataclass(frozen=True)
class WalletHandle:
    """A wallet's source-chain client with a back-reference to its secret."""

    client: ChainClient
    secret: str

    @property
    def address(self) -> str:
        return self.client.address


class ChainClientFactory(ABC):
    """Produce chain clients from secrets."""

    @abstractmethod
    def create(self, secret: str, chain: ChainDescriptor) -> ChainClient:
        pass

    @abstractmethod
    def switch_chain(self, handle: WalletHandle, chain_id: int) -> ChainClient:
        """Return a client for ``chain_id`` derived from the handle's secret."""
        pass

    def handle(self, secret: str, chain: ChainDescriptor) -> WalletHandle:
        return WalletHandle(client=self.create(secret, chain), secret=secret)


class RoutingProvider(ABC):
    """Price and execute cross-chain routes."""

    @abstractmethod
    def quote(self, intent: TransferIntent) -> Route:
        """Return a priced route or raise NoRouteFound."""
        pass

    @abstractmethod
    def execute(
        self,
        route: Route,
        handle: WalletHandle,
        *,
        on_progress: ProgressCallback,
        on_rate_update: RateUpdateCallback,
    ) -> Route:
        pass


class AcceptancePolicy(ABC):
    """Decide whether an exchange-rate update during execution is acceptable."""

    @abstractmethod
    def accept(self, previous_amount: int, new_amount: int) -> bool:
        pass

    def __call__(self, previous_amount: int, new_amount: int) -> bool:
        return self.accept(previous_amount, new_amount)
