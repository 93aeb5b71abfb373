"""Type definitions and data models for the bridge orchestration engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .chains import NATIVE_TOKEN
from .exceptions import LegFailed


class StepStatus(str, Enum):
    """Status labels reported for a route step."""

    STARTED = "STARTED"
    ACTION_REQUIRED = "ACTION_REQUIRED"
    PENDING = "PENDING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class TransferIntent:
    """A single self-bridge request, amounts already in wei."""

    from_chain: int
    to_chain: int
    from_address: str
    to_address: str
    from_amount: int
    slippage: float
    from_token: str = NATIVE_TOKEN
    to_token: str = NATIVE_TOKEN
    from_amount_for_gas: int | None = None

    def as_query(self, integrator: str | None = None) -> dict[str, Any]:
        """Return the intent as LI.FI quote query parameters."""

        params: dict[str, Any] = {
            "fromChain": self.from_chain,
            "toChain": self.to_chain,
            "fromToken": self.from_token,
            "toToken": self.to_token,
            "fromAmount": str(self.from_amount),
            "fromAddress": self.from_address,
            "toAddress": self.to_address,
            "slippage": self.slippage,
        }
        if self.from_amount_for_gas:
            params["fromAmountForGas"] = str(self.from_amount_for_gas)
        if integrator:
            params["integrator"] = integrator
        return params


@dataclass
class RouteStep:
    """One provider-selected step of a route."""

    type: str
    tool: str
    from_chain_id: int
    to_chain_id: int
    from_amount: int = 0
    to_amount: int = 0
    to_amount_min: int = 0
    transaction_request: dict[str, Any] | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain_id != self.to_chain_id

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RouteStep:
        """Construct a step from LI.FI step JSON."""

        action = data.get("action") or {}
        estimate = data.get("estimate") or {}
        tx_request = data.get("transactionRequest")

        return cls(
            type=str(data.get("type") or "unknown"),
            tool=str(data.get("tool") or ""),
            from_chain_id=int(action.get("fromChainId") or 0),
            to_chain_id=int(action.get("toChainId") or 0),
            from_amount=_as_int(estimate.get("fromAmount") or action.get("fromAmount")),
            to_amount=_as_int(estimate.get("toAmount")),
            to_amount_min=_as_int(estimate.get("toAmountMin")),
            transaction_request=dict(tx_request) if isinstance(tx_request, Mapping) else None,
            raw=dict(data),
        )


@dataclass
class Route:
    """A priced route, possibly multi-step, executing a transfer intent."""

    id: str
    from_chain_id: int
    to_chain_id: int
    from_amount: int
    to_amount: int
    to_amount_min: int
    steps: list[RouteStep]

    @classmethod
    def from_quote(cls, quote: Mapping[str, Any]) -> Route:
        """Wrap a single-step quote as a route."""

        step = RouteStep.from_dict(quote)
        return cls(
            id=str(quote.get("id") or ""),
            from_chain_id=step.from_chain_id,
            to_chain_id=step.to_chain_id,
            from_amount=step.from_amount,
            to_amount=step.to_amount,
            to_amount_min=step.to_amount_min,
            steps=[step],
        )


@dataclass(frozen=True)
class StepEvent:
    """A progress event emitted while a route executes."""

    step_index: int
    step_type: str
    from_chain_id: int
    to_chain_id: int
    message: str | None = None
    status: str | None = None
    tx_hash: str | None = None

    @property
    def label(self) -> str:
        return (
            f"[Step {self.step_index + 1}] {self.step_type} | "
            f"{self.from_chain_id}→{self.to_chain_id}"
        )

    def format_lines(self) -> list[str]:
        lines = []
        if self.message:
            lines.append(f"{self.label} :: {self.message}")
        if self.status:
            lines.append(f"{self.label} :: status={self.status}")
        if self.tx_hash:
            lines.append(f"{self.label} :: tx={self.tx_hash}")
        return lines


@dataclass(frozen=True)
class LegOutcome:
    """Terminal result of one bridge leg."""

    success: bool
    destination: str
    cycle: int = 0
    wallet_index: int = 0
    error: str | None = None
    tx_hashes: tuple[str, ...] = ()

    def raise_for_failure(self) -> None:
        if not self.success:
            raise LegFailed(self.destination, self.error or "unknown error")


@dataclass
class RunSummary:
    """In-memory tally of leg outcomes for one run."""

    outcomes: list[LegOutcome] = field(default_factory=list)
    wallets: int = 0

    def record(self, outcome: LegOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.success)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.success)

    @property
    def total(self) -> int:
        return len(self.outcomes)


def _as_int(value: Any) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, str) and value.lower().startswith("0x"):
        return int(value, 16)
    return int(value)
