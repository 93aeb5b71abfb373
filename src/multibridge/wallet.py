"""Web3-backed chain clients for per-wallet transaction signing."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, cast

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import HTTPProvider, Web3
from web3.middleware import SignAndSendRawMiddlewareBuilder

from .base import ChainClient, ChainClientFactory, WalletHandle
from .chains import DEFAULT_REGISTRY, ChainDescriptor, ChainRegistry
from .config import ClientConfig
from .exceptions import CredentialError, NetworkError, RouteExecutionError
from .utils import parse_hex_int, summarise_receipt

logger = logging.getLogger(__name__)


class Web3ChainClient(ChainClient):
    """Sign and submit transactions on one chain with a local account."""

    def __init__(
        self, secret: str, chain: ChainDescriptor, config: ClientConfig | None = None
    ) -> None:
        self._config = config or ClientConfig()
        self._chain = chain
        try:
            self._account = cast(LocalAccount, Account.from_key(secret))
        except Exception as exc:
            raise CredentialError(
                "Failed to derive signer account from provided private key",
                details={"error": str(exc)},
            ) from exc
        self._web3: Web3 | None = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def address(self) -> str:
        return self._account.address

    @property
    def chain(self) -> ChainDescriptor:
        return self._chain

    @property
    def account(self) -> LocalAccount:
        return self._account

    @property
    def web3(self) -> Web3:
        if self._web3 is None:
            self._web3 = self._build_web3()
        return self._web3

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------
    def send_transaction(self, tx_request: Mapping[str, Any]) -> str:
        tx = self.build_transaction(tx_request)
        logger.debug("Submitting transaction on %s to %s", self._chain.name, tx.get("to"))
        try:
            tx_hash = self.web3.eth.send_transaction(tx)  # type: ignore[arg-type]
        except Exception as exc:
            raise RouteExecutionError(
                f"Failed to submit transaction on {self._chain.name}",
                details={"to": tx.get("to"), "error": str(exc)},
            ) from exc

        tx_hex = tx_hash.to_0x_hex()
        logger.info("Transaction sent on %s hash=%s", self._chain.name, tx_hex)
        return tx_hex

    def wait_for_receipt(self, tx_hash: str) -> dict[str, Any]:
        receipt = self.web3.eth.wait_for_transaction_receipt(
            tx_hash,  # type: ignore[arg-type]
            timeout=self._config.receipt_timeout,
        )
        data = summarise_receipt(receipt)
        logger.info(
            "Transaction confirmed on %s hash=%s block=%s status=%s",
            self._chain.name,
            tx_hash,
            data.get("blockNumber"),
            data.get("status"),
        )
        return data

    def build_transaction(self, tx_request: Mapping[str, Any]) -> dict[str, Any]:
        """Normalise a LI.FI transaction request into a web3 transaction dict."""

        to = tx_request.get("to")
        if not to:
            raise RouteExecutionError("Transaction request has no recipient")

        chain_id = parse_hex_int(tx_request.get("chainId"))
        if chain_id is not None and chain_id != self._chain.chain_id:
            raise RouteExecutionError(
                f"Transaction targets chain {chain_id} but client is bound to "
                f"{self._chain.chain_id}",
                details={"chain_id": chain_id},
            )

        tx: dict[str, Any] = {
            "from": self.address,
            "to": Web3.to_checksum_address(to),
            "data": tx_request.get("data") or "0x",
            "value": parse_hex_int(tx_request.get("value")) or 0,
            "chainId": self._chain.chain_id,
        }

        gas_limit = parse_hex_int(tx_request.get("gasLimit") or tx_request.get("gas"))
        if gas_limit:
            tx["gas"] = int(gas_limit * self._config.gas_multiplier)

        gas_price = parse_hex_int(tx_request.get("gasPrice"))
        if gas_price:
            tx["gasPrice"] = gas_price

        return tx

    # ------------------------------------------------------------------
    # Internal wiring
    # ------------------------------------------------------------------
    def _build_web3(self) -> Web3:
        provider = HTTPProvider(
            self._chain.rpc_url, request_kwargs={"timeout": self._config.request_timeout}
        )
        web3 = Web3(provider)
        if not web3.is_connected():
            raise NetworkError(
                f"Unable to connect to {self._chain.name} RPC", endpoint=self._chain.rpc_url
            )
        web3.middleware_onion.add(SignAndSendRawMiddlewareBuilder.build(self._account))  # type: ignore[arg-type]
        web3.eth.default_account = self._account.address
        logger.info("Connected to %s RPC at %s", self._chain.name, self._chain.rpc_url)
        return web3


class Web3ClientFactory(ChainClientFactory):
    """Create Web3ChainClient instances against a chain registry."""

    def __init__(
        self, config: ClientConfig | None = None, registry: ChainRegistry = DEFAULT_REGISTRY
    ) -> None:
        self._config = config or ClientConfig()
        self._registry = registry

    def create(self, secret: str, chain: ChainDescriptor) -> ChainClient:
        return Web3ChainClient(secret, chain, self._config)

    def switch_chain(self, handle: WalletHandle, chain_id: int) -> ChainClient:
        if handle.client.chain.chain_id == chain_id:
            return handle.client

        chain = self._registry.require_id(chain_id)
        logger.debug("Switching %s to %s", handle.address, chain.name)
        return self.create(handle.secret, chain)
