"""Acceptance policies for exchange-rate updates during route execution."""

from __future__ import annotations

import logging
from decimal import Decimal

from .base import AcceptancePolicy
from .exceptions import InvalidParameter

logger = logging.getLogger(__name__)


class AlwaysAccept(AcceptancePolicy):
    """Accept every update; slippage is already bounded by the quote."""

    def accept(self, previous_amount: int, new_amount: int) -> bool:
        logger.info("Accepting rate update %s -> %s", previous_amount, new_amount)
        return True


class MaxRateDropPolicy(AcceptancePolicy):
    """Accept an update only when the amount drops by at most ``max_drop``."""

    def __init__(self, max_drop: float | str | Decimal) -> None:
        drop = Decimal(str(max_drop))
        if not drop.is_finite() or drop < 0 or drop >= 1:
            raise InvalidParameter(
                "max_drop must be a fraction in [0, 1)", field="max_drop", value=max_drop
            )
        self.max_drop = drop

    def accept(self, previous_amount: int, new_amount: int) -> bool:
        if previous_amount <= 0 or new_amount >= previous_amount:
            return True

        drop = Decimal(previous_amount - new_amount) / Decimal(previous_amount)
        accepted = drop <= self.max_drop
        logger.info(
            "Rate update %s -> %s (drop=%.4f%%, limit=%.4f%%): %s",
            previous_amount,
            new_amount,
            drop * 100,
            self.max_drop * 100,
            "accepted" if accepted else "rejected",
        )
        return accepted
