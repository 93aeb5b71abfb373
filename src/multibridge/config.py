"""Configuration containers and run-parameter validation."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .chains import DEFAULT_REGISTRY, ChainDescriptor, ChainRegistry
from .exceptions import InvalidParameter, InvalidSelection, NoValidDestinations
from .utils import to_decimal

logger = logging.getLogger(__name__)

DEFAULT_CYCLES = 1
DEFAULT_AMOUNT = Decimal("0.01")
DEFAULT_SLIPPAGE = Decimal("0.005")
DEFAULT_SOURCE_RESERVE = Decimal("0.001")
DEFAULT_DESTINATION_GAS = Decimal("0")

DEFAULT_MIN_DELAY = 5
DEFAULT_MAX_DELAY = 20

DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_RECEIPT_TIMEOUT = 180.0
DEFAULT_STATUS_POLL_INTERVAL = 5.0
DEFAULT_STATUS_MAX_POLLS = 120
DEFAULT_GAS_MULTIPLIER = 1.2

LIFI_API_URL = "https://li.quest/v1"
DEFAULT_INTEGRATOR = "multibridge"
DEFAULT_ACCOUNTS_FILE = "account.txt"


@dataclass(frozen=True)
class PacingConfig:
    """Closed whole-second range for the delay inserted after every leg."""

    min_seconds: int = DEFAULT_MIN_DELAY
    max_seconds: int = DEFAULT_MAX_DELAY

    def __post_init__(self) -> None:
        if self.min_seconds < 0 or self.max_seconds < self.min_seconds:
            raise InvalidParameter(
                "Delay range must satisfy 0 <= min <= max",
                field="delay",
                value=(self.min_seconds, self.max_seconds),
            )


@dataclass(frozen=True)
class RoutingConfig:
    """Construction-time configuration for the LI.FI routing provider."""

    api_url: str = LIFI_API_URL
    integrator: str = DEFAULT_INTEGRATOR
    api_key: str | None = None
    chain_ids: tuple[int, ...] = field(default_factory=tuple)
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    status_poll_interval: float = DEFAULT_STATUS_POLL_INTERVAL
    status_max_polls: int = DEFAULT_STATUS_MAX_POLLS

    def with_defaulted_urls(self) -> RoutingConfig:
        """Return a copy with the API URL stripped of trailing slashes."""

        return RoutingConfig(
            api_url=(self.api_url or LIFI_API_URL).rstrip("/"),
            integrator=self.integrator,
            api_key=self.api_key,
            chain_ids=tuple(self.chain_ids),
            request_timeout=self.request_timeout,
            status_poll_interval=self.status_poll_interval,
            status_max_polls=self.status_max_polls,
        )

    @classmethod
    def from_env(cls, chains: ChainRegistry = DEFAULT_REGISTRY) -> RoutingConfig:
        return cls(
            api_url=os.getenv("LIFI_API_URL", LIFI_API_URL),
            integrator=os.getenv("LIFI_INTEGRATOR", DEFAULT_INTEGRATOR),
            api_key=os.getenv("LIFI_API_KEY") or None,
            chain_ids=tuple(chain.chain_id for chain in chains),
        ).with_defaulted_urls()


@dataclass(frozen=True)
class ClientConfig:
    """Transport settings for per-wallet chain clients."""

    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    receipt_timeout: float = DEFAULT_RECEIPT_TIMEOUT
    gas_multiplier: float = DEFAULT_GAS_MULTIPLIER


@dataclass(frozen=True)
class RunConfiguration:
    """Validated, immutable parameters for one orchestration run."""

    source_chain: ChainDescriptor
    destination_chains: tuple[ChainDescriptor, ...]
    cycles: int = DEFAULT_CYCLES
    amount: Decimal = DEFAULT_AMOUNT
    slippage: Decimal = DEFAULT_SLIPPAGE
    source_reserve: Decimal = DEFAULT_SOURCE_RESERVE
    destination_gas: Decimal = DEFAULT_DESTINATION_GAS

    def __post_init__(self) -> None:
        destinations = tuple(
            chain
            for chain in dict.fromkeys(self.destination_chains)
            if chain.chain_id != self.source_chain.chain_id
        )
        if not destinations:
            raise NoValidDestinations("No valid destination chains selected")
        object.__setattr__(self, "destination_chains", destinations)

        object.__setattr__(self, "cycles", _validate_cycles(self.cycles))
        object.__setattr__(self, "amount", _validate_decimal("amount", self.amount, positive=True))
        object.__setattr__(
            self, "slippage", _validate_decimal("slippage", self.slippage, positive=True)
        )
        object.__setattr__(
            self, "source_reserve", _validate_decimal("source_reserve", self.source_reserve)
        )
        object.__setattr__(
            self, "destination_gas", _validate_decimal("destination_gas", self.destination_gas)
        )

    @property
    def destination_gas_enabled(self) -> bool:
        return self.destination_gas > 0

    @property
    def legs_per_wallet(self) -> int:
        return self.cycles * len(self.destination_chains)


def resolve_source(
    selection: str | int, registry: ChainRegistry = DEFAULT_REGISTRY
) -> ChainDescriptor:
    chain = registry.by_key(selection or "")
    if chain is None:
        raise InvalidSelection("Invalid source chain selection", selection=selection)
    return chain


def resolve_destinations(
    selection: str | Sequence[str],
    source: ChainDescriptor,
    registry: ChainRegistry = DEFAULT_REGISTRY,
) -> tuple[ChainDescriptor, ...]:
    """Resolve a comma-separated key list, dropping unknown keys and the source."""

    if isinstance(selection, str):
        keys = [part.strip() for part in selection.split(",")] if selection.strip() else []
    else:
        keys = [str(part).strip() for part in selection]

    resolved: list[ChainDescriptor] = []
    for key in keys:
        chain = registry.by_key(key)
        if chain is None:
            logger.debug("Ignoring unknown destination key %r", key)
            continue
        if chain.chain_id == source.chain_id or chain in resolved:
            continue
        resolved.append(chain)

    if not resolved:
        raise NoValidDestinations(
            "No valid destination chains selected",
            details={"selection": selection, "source": source.key},
        )
    return tuple(resolved)


def build_run_config(
    source: str | int,
    destinations: str | Sequence[str],
    *,
    cycles: int | str = DEFAULT_CYCLES,
    amount: float | str | Decimal = DEFAULT_AMOUNT,
    slippage: float | str | Decimal = DEFAULT_SLIPPAGE,
    source_reserve: float | str | Decimal = DEFAULT_SOURCE_RESERVE,
    destination_gas: float | str | Decimal | None = None,
    registry: ChainRegistry = DEFAULT_REGISTRY,
) -> RunConfiguration:
    """Validate raw selections and parameters into a RunConfiguration.

    Args:
        source: Selection key of the source chain (e.g. ``"2"``)
        destinations: Comma-separated selection keys (e.g. ``"3,4"``)
        cycles: Number of passes over the destinations per wallet
        amount: Native amount bridged per leg
        slippage: Decimal fraction, 0.005 meaning 0.5%
        source_reserve: Native amount to keep on the source chain
        destination_gas: Gas top-up delivered on the destination; None disables it

    Raises:
        InvalidSelection, NoValidDestinations, InvalidParameter
    """
    source_chain = resolve_source(source, registry)
    destination_chains = resolve_destinations(destinations, source_chain, registry)

    return RunConfiguration(
        source_chain=source_chain,
        destination_chains=destination_chains,
        cycles=_coerce_cycles(cycles),
        amount=to_decimal(amount, field="amount"),
        slippage=to_decimal(slippage, field="slippage"),
        source_reserve=to_decimal(source_reserve, field="source_reserve"),
        destination_gas=(
            DEFAULT_DESTINATION_GAS
            if destination_gas is None
            else to_decimal(destination_gas, field="destination_gas")
        ),
    )


def rpc_overrides_from_env(
    registry: ChainRegistry = DEFAULT_REGISTRY, environ: Mapping[str, str] | None = None
) -> dict[int, str]:
    """Collect ``RPC_<CHAINID>`` endpoint overrides."""

    env = os.environ if environ is None else environ
    overrides: dict[int, str] = {}
    for chain in registry:
        value = env.get(f"RPC_{chain.chain_id}")
        if value:
            overrides[chain.chain_id] = value.strip()
    return overrides


def _coerce_cycles(value: int | str) -> int:
    if isinstance(value, bool):
        raise InvalidParameter("cycles must be a positive integer", field="cycles", value=value)
    if isinstance(value, int):
        return value
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidParameter(
            "cycles must be a positive integer", field="cycles", value=value
        ) from exc
    # "2.0" counts as 2, "1.5" does not
    if not number.is_finite() or number != number.to_integral_value():
        raise InvalidParameter("cycles must be a positive integer", field="cycles", value=value)
    return int(number)


def _validate_cycles(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidParameter("cycles must be a positive integer", field="cycles", value=value)
    return value


def _validate_decimal(name: str, value: Decimal, *, positive: bool = False) -> Decimal:
    quantity = to_decimal(value, field=name)
    if positive and quantity <= 0:
        raise InvalidParameter(f"{name} must be greater than zero", field=name, value=value)
    if quantity < 0:
        raise InvalidParameter(f"{name} cannot be negative", field=name, value=value)
    return quantity
