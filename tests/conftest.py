from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from multibridge.base import (
    ChainClient,
    ChainClientFactory,
    ProgressCallback,
    RateUpdateCallback,
    RoutingProvider,
    WalletHandle,
)
from multibridge.chains import DEFAULT_REGISTRY, ChainDescriptor
from multibridge.exceptions import NoRouteFound
from multibridge.types import Route, RouteStep, StepEvent, TransferIntent

TEST_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


class DummyClient(ChainClient):
    def __init__(self, secret: str, chain: ChainDescriptor) -> None:
        self.secret = secret
        self._chain = chain
        self.sent: list[Mapping[str, Any]] = []
        self.receipt_status = 1

    @property
    def address(self) -> str:
        return f"addr-{self.secret}"

    @property
    def chain(self) -> ChainDescriptor:
        return self._chain

    def send_transaction(self, tx_request: Mapping[str, Any]) -> str:
        self.sent.append(tx_request)
        return f"0x{len(self.sent):064x}"

    def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        return {"transactionHash": tx_hash, "status": self.receipt_status}


class DummyFactory(ChainClientFactory):
    def __init__(self) -> None:
        self.created: list[tuple[str, int]] = []
        self.switched: list[tuple[str, int]] = []

    def create(self, secret: str, chain: ChainDescriptor) -> ChainClient:
        self.created.append((secret, chain.chain_id))
        return DummyClient(secret, chain)

    def switch_chain(self, handle: WalletHandle, chain_id: int) -> ChainClient:
        self.switched.append((handle.secret, chain_id))
        return DummyClient(handle.secret, DEFAULT_REGISTRY.require_id(chain_id))


class DummyProvider(RoutingProvider):
    """Records every leg; ``fail_when(intent, call_number)`` selects quote failures."""

    def __init__(
        self,
        fail_when: Callable[[TransferIntent, int], bool] | None = None,
        events_per_route: int = 1,
    ) -> None:
        self.intents: list[TransferIntent] = []
        self.executed: list[tuple[Route, WalletHandle]] = []
        self._fail_when = fail_when
        self._events_per_route = events_per_route

    def quote(self, intent: TransferIntent) -> Route:
        self.intents.append(intent)
        if self._fail_when and self._fail_when(intent, len(self.intents)):
            raise NoRouteFound("no route", from_chain=intent.from_chain, to_chain=intent.to_chain)
        step = RouteStep(
            type="lifi",
            tool="stub",
            from_chain_id=intent.from_chain,
            to_chain_id=intent.to_chain,
            from_amount=intent.from_amount,
            to_amount=intent.from_amount,
            to_amount_min=intent.from_amount,
        )
        return Route(
            id=str(len(self.intents)),
            from_chain_id=intent.from_chain,
            to_chain_id=intent.to_chain,
            from_amount=intent.from_amount,
            to_amount=intent.from_amount,
            to_amount_min=intent.from_amount,
            steps=[step],
        )

    def execute(
        self,
        route: Route,
        handle: WalletHandle,
        *,
        on_progress: ProgressCallback,
        on_rate_update: RateUpdateCallback,
    ) -> Route:
        self.executed.append((route, handle))
        for index in range(self._events_per_route):
            on_progress(
                StepEvent(
                    step_index=0,
                    step_type="lifi",
                    from_chain_id=route.from_chain_id,
                    to_chain_id=route.to_chain_id,
                    message="working",
                    status="PENDING",
                    tx_hash=f"0x{index:02x}",
                )
            )
        return route


@pytest.fixture
def factory() -> DummyFactory:
    return DummyFactory()


@pytest.fixture
def provider() -> DummyProvider:
    return DummyProvider()
