from __future__ import annotations

from typing import Any

import pytest
from conftest import DummyClient, DummyFactory
from requests import Session

from multibridge.base import WalletHandle
from multibridge.chains import ARBITRUM, OPTIMISM
from multibridge.config import RoutingConfig
from multibridge.exceptions import (
    NetworkError,
    NoRouteFound,
    RateUpdateRejected,
    RouteExecutionError,
)
from multibridge.routing.lifi import LiFiRoutingProvider
from multibridge.types import Route, RouteStep, StepEvent, TransferIntent


class DummyResponse:
    def __init__(self, payload: Any, *, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def raise_for_status(self) -> None:
        if not (200 <= self.status_code < 300):
            raise RuntimeError(f"status={self.status_code}")

    def json(self) -> Any:
        return self._payload


class DummySession(Session):
    def __init__(self, responses: dict[str, list[DummyResponse]]) -> None:
        super().__init__()
        self._responses = responses
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    def _next(self, method: str, url: str, payload: dict[str, Any] | None) -> DummyResponse:
        self.calls.append((method, url, payload))
        endpoint = url.rsplit("/", 1)[-1]
        queue = self._responses[endpoint]
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def get(  # type: ignore[override]
        self, url: str, params: dict[str, Any] | None = None, timeout: float = 0, **_: Any
    ):
        return self._next("GET", url, params)

    def post(  # type: ignore[override]
        self, url: str, json: dict[str, Any] | None = None, timeout: float = 0, **_: Any
    ):
        return self._next("POST", url, json)


def _quote(tx_request: dict[str, Any] | None = None, **estimate: Any) -> dict[str, Any]:
    return {
        "id": "quote-1",
        "type": "lifi",
        "tool": "across",
        "action": {"fromChainId": 10, "toChainId": 42161, "fromAmount": "10000000000000000"},
        "estimate": {
            "fromAmount": "10000000000000000",
            "toAmount": estimate.get("to_amount", "9990000000000000"),
            "toAmountMin": estimate.get("to_amount_min", "9940000000000000"),
        },
        "transactionRequest": tx_request,
    }


def _intent(to_chain: int = ARBITRUM.chain_id) -> TransferIntent:
    return TransferIntent(
        from_chain=OPTIMISM.chain_id,
        to_chain=to_chain,
        from_address="addr",
        to_address="addr",
        from_amount=10000000000000000,
        slippage=0.005,
        from_amount_for_gas=200000000000000,
    )


def _provider(session: DummySession, factory: DummyFactory | None = None, **config: Any):
    return LiFiRoutingProvider(
        RoutingConfig(api_url="https://li.quest/v1/", status_poll_interval=0, **config),
        factory or DummyFactory(),
        session,
        sleep=lambda _: None,
    )


TX_REQUEST = {"to": "0x1231deb6f5749ef6ce6943a275a1d3e7486f4eae", "value": "0x1", "chainId": 10}


class TestQuote:
    def test_quote_builds_route_and_query(self) -> None:
        session = DummySession({"quote": [DummyResponse(_quote(TX_REQUEST))]})
        route = _provider(session).quote(_intent())

        assert route.from_chain_id == 10
        assert route.to_chain_id == 42161
        assert route.to_amount_min == 9940000000000000
        assert route.steps[0].tool == "across"
        assert route.steps[0].transaction_request == TX_REQUEST

        method, url, params = session.calls[0]
        assert (method, url) == ("GET", "https://li.quest/v1/quote")
        assert params is not None
        assert params["fromAmount"] == "10000000000000000"
        assert params["fromAmountForGas"] == "200000000000000"
        assert params["toAddress"] == params["fromAddress"] == "addr"
        assert params["integrator"] == "multibridge"

    def test_quote_no_route_404(self) -> None:
        session = DummySession({"quote": [DummyResponse({"message": "x"}, status_code=404)]})
        with pytest.raises(NoRouteFound):
            _provider(session).quote(_intent())

    def test_quote_no_available_quotes_400(self) -> None:
        body = {"message": "No available quotes for the requested transfer"}
        session = DummySession({"quote": [DummyResponse(body, status_code=400)]})
        with pytest.raises(NoRouteFound):
            _provider(session).quote(_intent())

    def test_quote_missing_transaction_request(self) -> None:
        session = DummySession({"quote": [DummyResponse(_quote(None))]})
        with pytest.raises(NoRouteFound):
            _provider(session).quote(_intent())

    def test_quote_server_error(self) -> None:
        session = DummySession({"quote": [DummyResponse({"message": "x"}, status_code=500)]})
        with pytest.raises(NetworkError) as excinfo:
            _provider(session).quote(_intent())
        assert excinfo.value.status_code == 500

    def test_quote_unconfigured_chain(self) -> None:
        session = DummySession({"quote": [DummyResponse(_quote(TX_REQUEST))]})
        provider = _provider(session, chain_ids=(10, 42161))
        with pytest.raises(NoRouteFound):
            provider.quote(_intent(to_chain=1))
        assert session.calls == []

    def test_api_key_header(self) -> None:
        session = DummySession({})
        _provider(session, api_key="secret")
        assert session.headers["x-lifi-api-key"] == "secret"


class TestExecute:
    def _run(
        self, session: DummySession, route: Route, *, accept: bool = True
    ) -> tuple[list[StepEvent], list[tuple[int, int]], DummyClient, DummyFactory]:
        factory = DummyFactory()
        handle = factory.handle("0x01", OPTIMISM)
        events: list[StepEvent] = []
        updates: list[tuple[int, int]] = []

        def on_rate_update(previous: int, new: int) -> bool:
            updates.append((previous, new))
            return accept

        _provider(session, factory).execute(
            route, handle, on_progress=events.append, on_rate_update=on_rate_update
        )
        return events, updates, handle.client, factory  # type: ignore[return-value]

    def test_cross_chain_step_polls_status(self) -> None:
        session = DummySession(
            {
                "status": [
                    DummyResponse({}, status_code=404),
                    DummyResponse({"status": "PENDING", "substatus": "WAIT_DESTINATION"}),
                    DummyResponse({"status": "PENDING", "substatus": "WAIT_DESTINATION"}),
                    DummyResponse({"status": "DONE", "receiving": {"txHash": "0xdest"}}),
                ]
            }
        )
        route = Route.from_quote(_quote(TX_REQUEST))

        events, updates, client, _ = self._run(session, route)

        assert client.sent == [TX_REQUEST]
        assert updates == []
        statuses = [event.status for event in events]
        assert statuses[0] == "ACTION_REQUIRED"
        assert statuses.count("PENDING") == 3  # submitted, waiting, one deduplicated poll
        assert statuses[-1] == "DONE"
        assert events[-1].tx_hash == "0xdest"
        assert events[1].tx_hash == f"0x{1:064x}"
        status_params = session.calls[-1][2]
        assert status_params is not None
        assert status_params["bridge"] == "across"

    def test_failed_bridge_status_raises(self) -> None:
        session = DummySession({"status": [DummyResponse({"status": "FAILED"})]})
        route = Route.from_quote(_quote(TX_REQUEST))
        with pytest.raises(RouteExecutionError):
            self._run(session, route)

    def test_status_timeout(self) -> None:
        session = DummySession({"status": [DummyResponse({"status": "PENDING"})]})
        route = Route.from_quote(_quote(TX_REQUEST))
        factory = DummyFactory()
        provider = _provider(session, factory, status_max_polls=3)
        with pytest.raises(TimeoutError):
            provider.execute(
                route,
                factory.handle("0x01", OPTIMISM),
                on_progress=lambda event: None,
                on_rate_update=lambda previous, new: True,
            )
        assert len(session.calls) == 3

    def test_reverted_receipt_raises(self) -> None:
        session = DummySession({})
        route = Route.from_quote(_quote(TX_REQUEST))
        factory = DummyFactory()
        handle = factory.handle("0x01", OPTIMISM)
        assert isinstance(handle.client, DummyClient)
        handle.client.receipt_status = 0
        with pytest.raises(RouteExecutionError):
            _provider(session, factory).execute(
                route,
                handle,
                on_progress=lambda event: None,
                on_rate_update=lambda previous, new: True,
            )

    def test_same_chain_step_skips_status(self) -> None:
        session = DummySession({})
        quote = _quote(TX_REQUEST)
        quote["action"]["toChainId"] = 10
        events, _, _, _ = self._run(session, Route.from_quote(quote))
        assert events[-1].status == "DONE"
        assert session.calls == []

    def test_step_on_other_chain_switches_client(self) -> None:
        session = DummySession({})
        step = RouteStep(
            type="swap",
            tool="uniswap",
            from_chain_id=42161,
            to_chain_id=42161,
            transaction_request={"to": "0x01"},
        )
        route = Route("r", 10, 42161, 1, 1, 1, [step])
        _, _, client, factory = self._run(session, route)
        assert factory.switched == [("0x01", 42161)]
        assert client.sent == []

    def test_refreshed_step_rate_update_accepted(self) -> None:
        refreshed = _quote(TX_REQUEST, to_amount="9900000000000000")
        session = DummySession(
            {
                "stepTransaction": [DummyResponse(refreshed)],
                "status": [DummyResponse({"status": "DONE"})],
            }
        )
        route = Route.from_quote(_quote(None))

        events, updates, client, _ = self._run(session, route)

        assert updates == [(9940000000000000, 9900000000000000)]
        assert client.sent == [TX_REQUEST]
        assert events[0].status == "STARTED"
        assert route.steps[0].to_amount == 9900000000000000

    def test_refreshed_step_rate_update_rejected(self) -> None:
        refreshed = _quote(TX_REQUEST, to_amount="9000000000000000")
        session = DummySession({"stepTransaction": [DummyResponse(refreshed)]})
        route = Route.from_quote(_quote(None))

        with pytest.raises(RateUpdateRejected):
            self._run(session, route, accept=False)

    def test_refresh_without_rate_drop_skips_policy(self) -> None:
        session = DummySession(
            {
                "stepTransaction": [DummyResponse(_quote(TX_REQUEST))],
                "status": [DummyResponse({"status": "DONE"})],
            }
        )
        _, updates, client, _ = self._run(session, Route.from_quote(_quote(None)))
        assert updates == []
        assert client.sent == [TX_REQUEST]
