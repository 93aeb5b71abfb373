"""Supported networks and registry lookups."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .exceptions import UnknownChain

# Native currency is addressed as the zero address on both sides of a route
NATIVE_TOKEN = "0x0000000000000000000000000000000000000000"
NATIVE_DECIMALS = 18


@dataclass(frozen=True)
class ChainDescriptor:
    """Static description of one EVM network."""

    chain_id: int
    name: str
    key: str
    rpc_url: str
    native_symbol: str = "ETH"


BASE = ChainDescriptor(chain_id=8453, name="Base", key="1", rpc_url="https://mainnet.base.org")
OPTIMISM = ChainDescriptor(
    chain_id=10, name="OP Mainnet", key="2", rpc_url="https://mainnet.optimism.io"
)
ARBITRUM = ChainDescriptor(
    chain_id=42161, name="Arbitrum One", key="3", rpc_url="https://arb1.arbitrum.io/rpc"
)
INK = ChainDescriptor(chain_id=57073, name="Ink", key="4", rpc_url="https://rpc-gel.inkonchain.com")

DEFAULT_CHAINS: tuple[ChainDescriptor, ...] = (BASE, OPTIMISM, ARBITRUM, INK)


class ChainRegistry:
    """Immutable lookup table indexed by selection key and chain id."""

    def __init__(self, chains: Iterable[ChainDescriptor] = DEFAULT_CHAINS) -> None:
        ordered = tuple(chains)
        by_key: dict[str, ChainDescriptor] = {}
        by_id: dict[int, ChainDescriptor] = {}
        for chain in ordered:
            if chain.key in by_key:
                raise ValueError(f"Duplicate chain selection key: {chain.key}")
            if chain.chain_id in by_id:
                raise ValueError(f"Duplicate chain id: {chain.chain_id}")
            by_key[chain.key] = chain
            by_id[chain.chain_id] = chain

        self._chains = ordered
        self._by_key = by_key
        self._by_id = by_id

    def __iter__(self) -> Iterator[ChainDescriptor]:
        return iter(self._chains)

    def __len__(self) -> int:
        return len(self._chains)

    def by_key(self, key: str | int) -> ChainDescriptor | None:
        return self._by_key.get(str(key).strip())

    def by_id(self, chain_id: int) -> ChainDescriptor | None:
        return self._by_id.get(chain_id)

    def require_key(self, key: str | int) -> ChainDescriptor:
        chain = self.by_key(key)
        if chain is None:
            raise UnknownChain(key)
        return chain

    def require_id(self, chain_id: int) -> ChainDescriptor:
        chain = self.by_id(chain_id)
        if chain is None:
            raise UnknownChain(chain_id)
        return chain

    def with_rpc_overrides(self, overrides: dict[int, str]) -> ChainRegistry:
        """Return a registry whose RPC endpoints are replaced where overridden."""

        return ChainRegistry(
            ChainDescriptor(
                chain_id=chain.chain_id,
                name=chain.name,
                key=chain.key,
                rpc_url=overrides.get(chain.chain_id, chain.rpc_url),
                native_symbol=chain.native_symbol,
            )
            for chain in self._chains
        )

    def describe(self) -> str:
        """Render the selection menu line, e.g. ``1) Base | 2) OP Mainnet``."""

        return " | ".join(f"{chain.key}) {chain.name}" for chain in self._chains)


DEFAULT_REGISTRY = ChainRegistry()
