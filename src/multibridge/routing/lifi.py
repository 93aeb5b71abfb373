"""LI.FI routing provider: quotes over REST, execution through chain clients."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

import requests

from ..base import (
    ChainClient,
    ChainClientFactory,
    ProgressCallback,
    RateUpdateCallback,
    RoutingProvider,
    WalletHandle,
)
from ..config import RoutingConfig
from ..exceptions import NetworkError, NoRouteFound, RateUpdateRejected, RouteExecutionError
from ..types import Route, RouteStep, StepEvent, StepStatus, TransferIntent

logger = logging.getLogger(__name__)

_NO_ROUTE_MARKERS = ("no available quotes", "no route", "none of the available routes")
_TERMINAL_FAILURES = frozenset({"FAILED", "INVALID"})


class LiFiRoutingProvider(RoutingProvider):
    """Route native-currency bridges through the LI.FI API."""

    def __init__(
        self,
        config: RoutingConfig,
        client_factory: ChainClientFactory,
        session: requests.Session | None = None,
        *,
        sleep=time.sleep,
    ) -> None:
        self._config = config.with_defaulted_urls()
        self._client_factory = client_factory
        self._session = session or requests.Session()
        self._sleep = sleep

        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["x-lifi-api-key"] = self._config.api_key
        self._session.headers.update(headers)

    @property
    def config(self) -> RoutingConfig:
        return self._config

    # ------------------------------------------------------------------
    # Quoting
    # ------------------------------------------------------------------
    def quote(self, intent: TransferIntent) -> Route:
        self._check_supported(intent)

        url = f"{self._config.api_url}/quote"
        params = intent.as_query(self._config.integrator)
        logger.debug("Fetching LI.FI quote: %s %s", url, params)

        try:
            response = self._session.get(url, params=params, timeout=self._config.request_timeout)
        except requests.RequestException as exc:
            raise NetworkError(
                "Failed to fetch LI.FI quote", endpoint=url, details={"error": str(exc)}
            ) from exc

        if response.status_code in (400, 404) and _looks_like_no_route(response):
            raise NoRouteFound(
                f"No route from chain {intent.from_chain} to chain {intent.to_chain}",
                from_chain=intent.from_chain,
                to_chain=intent.to_chain,
                details={"response": _safe_json(response)},
            )
        if not (200 <= response.status_code < 300):
            raise NetworkError(
                "LI.FI quote request failed",
                endpoint=url,
                status_code=response.status_code,
                details={"response": _safe_json(response)},
            )

        quote = response.json()
        if not isinstance(quote, Mapping) or not quote.get("transactionRequest"):
            raise NoRouteFound(
                "Quote response did not include a transaction request",
                from_chain=intent.from_chain,
                to_chain=intent.to_chain,
                details={"response": quote},
            )

        route = Route.from_quote(quote)
        logger.info(
            "Quote via %s: %s -> %s wei (min %s)",
            route.steps[0].tool,
            route.from_amount,
            route.to_amount,
            route.to_amount_min,
        )
        return route

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def execute(
        self,
        route: Route,
        handle: WalletHandle,
        *,
        on_progress: ProgressCallback,
        on_rate_update: RateUpdateCallback,
    ) -> Route:
        for index, step in enumerate(route.steps):
            self._execute_step(index, step, handle, on_progress, on_rate_update)
        return route

    def _execute_step(
        self,
        index: int,
        step: RouteStep,
        handle: WalletHandle,
        on_progress: ProgressCallback,
        on_rate_update: RateUpdateCallback,
    ) -> None:
        def emit(**fields: Any) -> None:
            on_progress(
                StepEvent(
                    step_index=index,
                    step_type=step.type,
                    from_chain_id=step.from_chain_id,
                    to_chain_id=step.to_chain_id,
                    **fields,
                )
            )

        client = self._client_for(handle, step.from_chain_id)

        if step.transaction_request is None:
            emit(message="Preparing transaction", status=StepStatus.STARTED.value)
            previous_min = step.to_amount_min
            refreshed = self._refresh_step(step)
            if previous_min and refreshed.to_amount < previous_min:
                if not on_rate_update(previous_min, refreshed.to_amount):
                    emit(message="Exchange rate update declined", status=StepStatus.FAILED.value)
                    raise RateUpdateRejected(
                        "Exchange rate update declined",
                        step_index=index,
                        details={"previous": previous_min, "updated": refreshed.to_amount},
                    )
            step.transaction_request = refreshed.transaction_request
            step.to_amount = refreshed.to_amount
            step.to_amount_min = refreshed.to_amount_min

        if not step.transaction_request:
            raise RouteExecutionError("Step has no transaction request", step_index=index)

        emit(message="Sending transaction", status=StepStatus.ACTION_REQUIRED.value)
        tx_hash = client.send_transaction(step.transaction_request)
        emit(message="Transaction submitted", status=StepStatus.PENDING.value, tx_hash=tx_hash)

        receipt = client.wait_for_receipt(tx_hash)
        if receipt.get("status") == 0:
            emit(message="Transaction reverted", status=StepStatus.FAILED.value, tx_hash=tx_hash)
            raise RouteExecutionError(
                "Transaction reverted", step_index=index, tx_hash=tx_hash, details=receipt
            )

        if step.is_cross_chain:
            emit(message="Waiting for destination chain", status=StepStatus.PENDING.value)
            status = self._wait_for_status(index, step, tx_hash, emit)
            receiving = status.get("receiving") or {}
            emit(
                message="Bridge completed",
                status=StepStatus.DONE.value,
                tx_hash=receiving.get("txHash") or tx_hash,
            )
        else:
            emit(message="Swap completed", status=StepStatus.DONE.value, tx_hash=tx_hash)

    def _client_for(self, handle: WalletHandle, chain_id: int) -> ChainClient:
        if handle.client.chain.chain_id == chain_id:
            return handle.client
        return self._client_factory.switch_chain(handle, chain_id)

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------
    def _refresh_step(self, step: RouteStep) -> RouteStep:
        url = f"{self._config.api_url}/advanced/stepTransaction"
        try:
            response = self._session.post(url, json=step.raw, timeout=self._config.request_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NetworkError(
                "Failed to refresh step transaction",
                endpoint=url,
                status_code=getattr(getattr(exc, "response", None), "status_code", None),
                details={"error": str(exc)},
            ) from exc
        return RouteStep.from_dict(response.json())

    def _wait_for_status(
        self, index: int, step: RouteStep, tx_hash: str, emit
    ) -> Mapping[str, Any]:
        url = f"{self._config.api_url}/status"
        params = {
            "txHash": tx_hash,
            "bridge": step.tool,
            "fromChain": step.from_chain_id,
            "toChain": step.to_chain_id,
        }
        last_reported: str | None = None

        for attempt in range(self._config.status_max_polls):
            try:
                response = self._session.get(
                    url, params=params, timeout=self._config.request_timeout
                )
            except requests.RequestException as exc:  # pragma: no cover - network flake
                logger.debug(
                    "Status poll error (attempt %s/%s): %s",
                    attempt + 1,
                    self._config.status_max_polls,
                    exc,
                )
                self._sleep(self._config.status_poll_interval)
                continue

            if response.status_code == 404:
                self._sleep(self._config.status_poll_interval)
                continue

            if not (200 <= response.status_code < 300):
                raise NetworkError(
                    "LI.FI status request failed",
                    endpoint=url,
                    status_code=response.status_code,
                    details={"response": _safe_json(response)},
                )

            payload = response.json()
            status = str(payload.get("status", "")).upper()
            substatus = payload.get("substatusMessage") or payload.get("substatus")
            reported = f"{status}:{substatus}"
            if reported != last_reported:
                emit(message=substatus, status=status or None)
                last_reported = reported

            if status == StepStatus.DONE.value:
                return payload
            if status in _TERMINAL_FAILURES:
                raise RouteExecutionError(
                    f"Bridge transfer {status.lower()}: {substatus or 'no details'}",
                    step_index=index,
                    tx_hash=tx_hash,
                    details=dict(payload),
                )

            self._sleep(self._config.status_poll_interval)

        raise TimeoutError(
            "Timed out waiting for bridge status after "
            f"{self._config.status_max_polls * self._config.status_poll_interval:.0f} seconds"
        )

    def _check_supported(self, intent: TransferIntent) -> None:
        allowed = self._config.chain_ids
        if not allowed:
            return
        for chain_id in (intent.from_chain, intent.to_chain):
            if chain_id not in allowed:
                raise NoRouteFound(
                    f"Chain {chain_id} is not configured for routing",
                    from_chain=intent.from_chain,
                    to_chain=intent.to_chain,
                )


def _safe_json(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _looks_like_no_route(response: requests.Response) -> bool:
    if response.status_code == 404:
        return True
    body = _safe_json(response)
    message = body.get("message", "") if isinstance(body, Mapping) else str(body)
    return any(marker in str(message).lower() for marker in _NO_ROUTE_MARKERS)
