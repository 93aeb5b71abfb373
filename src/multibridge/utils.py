"""Utility functions for amount conversion, pacing and receipts."""

from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any

from hexbytes import HexBytes

from .chains import NATIVE_DECIMALS
from .exceptions import InvalidParameter

logger = logging.getLogger(__name__)


def to_decimal(value: float | int | str | Decimal, field: str = "value") -> Decimal:
    """Convert a human-readable number to Decimal without binary float drift."""

    if isinstance(value, Decimal):
        quantity = value
    elif isinstance(value, bool):
        raise InvalidParameter(f"{field} must be numeric", field=field, value=value)
    else:
        try:
            quantity = Decimal(str(value).strip())
        except (ValueError, InvalidOperation) as exc:
            raise InvalidParameter(
                f"{field} is not a valid number",
                field=field,
                value=value,
                details={"error": str(exc)},
            ) from exc

    if not quantity.is_finite():
        raise InvalidParameter(f"{field} must be finite", field=field, value=value)
    return quantity


def to_wei(value: float | int | str | Decimal, decimals: int = NATIVE_DECIMALS) -> int:
    """Convert an amount in native units to its smallest unit.

    Digits beyond ``decimals`` places are truncated.
    """
    quantity = to_decimal(value, field="amount")
    if quantity < 0:
        raise InvalidParameter("Amount cannot be negative", field="amount", value=value)

    scaled = quantity.scaleb(decimals)
    integral = scaled.to_integral_value(rounding=ROUND_DOWN)
    if integral != scaled:
        logger.warning("Truncating amount %s to %s decimals", value, decimals)
    return int(integral)


def from_wei(amount: int, decimals: int = NATIVE_DECIMALS) -> Decimal:
    return Decimal(amount).scaleb(-decimals)


def random_delay_seconds(
    min_seconds: int = 5, max_seconds: int = 20, rng: random.Random | None = None
) -> int:
    """Draw a whole-second delay uniformly from the closed range [min, max]."""
    if min_seconds < 0 or max_seconds < min_seconds:
        raise InvalidParameter(
            "Delay range must satisfy 0 <= min <= max",
            field="delay",
            value=(min_seconds, max_seconds),
        )
    source = rng if rng is not None else random
    return source.randint(min_seconds, max_seconds)


def normalise_private_key(key: str) -> str:
    key = key.strip()
    return key if key.startswith("0x") else f"0x{key}"


def parse_hex_int(value: Any) -> int | None:
    """Parse a LI.FI transaction field that may be hex, decimal or absent."""
    if value is None or value == "":
        return None
    if isinstance(value, int):
        return value
    text = str(value)
    if text.lower().startswith("0x"):
        return int(text, 16)
    return int(text)


def summarise_receipt(receipt: Mapping[str, Any] | None) -> dict[str, Any]:
    """Pick the confirmation fields of a receipt, with hashes as 0x strings."""
    if not receipt:
        return {}
    tx_hash = receipt.get("transactionHash")
    if isinstance(tx_hash, bytes | bytearray):
        tx_hash = HexBytes(tx_hash).to_0x_hex()
    return {
        "transactionHash": tx_hash,
        "blockNumber": receipt.get("blockNumber"),
        "status": receipt.get("status"),
        "gasUsed": receipt.get("gasUsed"),
    }
