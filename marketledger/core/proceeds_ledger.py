"""Proceeds Ledger — withdrawable sale revenue per seller.

Balances only grow through ``credit`` (a completed sale) and only shrink
through ``drain`` (a withdrawal), which always takes the whole balance.
``restore`` exists solely to roll back a drain or credit whose surrounding
operation failed.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ProceedsLedger:
    """In-memory seller balance book."""

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}

    def balance_of(self, seller: str) -> int:
        return self._balances.get(seller, 0)

    def credit(self, seller: str, amount: int) -> int:
        """Add *amount* to *seller*'s balance and return the new balance."""
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount: {amount}")
        new_balance = self.balance_of(seller) + amount
        self._balances[seller] = new_balance
        logger.debug("Credited %d to %s (balance %d).", amount, seller, new_balance)
        return new_balance

    def drain(self, seller: str) -> int:
        """Reset *seller*'s balance to zero and return what it held."""
        amount = self._balances.pop(seller, 0)
        logger.debug("Drained %d from %s.", amount, seller)
        return amount

    def restore(self, seller: str, balance: int) -> None:
        """Put *seller*'s balance back to a previously observed value."""
        if balance:
            self._balances[seller] = balance
        else:
            self._balances.pop(seller, None)

    def total(self) -> int:
        """Sum of every outstanding balance."""
        return sum(self._balances.values())
