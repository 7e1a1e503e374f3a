"""Value transfer boundary — paying out proceeds.

``ValueTransfer.send`` reports success or failure; it must never lose
funds silently.  ``InMemoryWallets`` is the reference implementation used
by the tests and the demo.  It keeps plain integer balances, can be told to
refuse payments to an identity, and supports receiver hooks that run when a
payment lands (the payout equivalent of an untrusted fallback function).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

PaymentHook = Callable[[int], None]
"""Called as ``hook(amount)`` after *amount* is credited to the recipient."""


@runtime_checkable
class ValueTransfer(Protocol):
    """Sends value to an identity."""

    def send(self, recipient: str, amount: int) -> bool:
        """Pay *amount* to *recipient*; return ``False`` if the payment failed."""
        ...


class InMemoryWallets:
    """Identity -> balance book implementing ``ValueTransfer``.

    Examples
    --------
    >>> wallets = InMemoryWallets()
    >>> wallets.send("alice", 100)
    True
    >>> wallets.balance_of("alice")
    100
    >>> wallets.block("bob")
    >>> wallets.send("bob", 5)
    False
    """

    def __init__(self) -> None:
        self._balances: dict[str, int] = {}
        self._blocked: set[str] = set()
        self._payment_hooks: dict[str, list[PaymentHook]] = {}

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def fund(self, identity: str, amount: int) -> None:
        """Give *identity* an opening balance (test and demo helper)."""
        self._balances[identity] = self.balance_of(identity) + amount

    def charge(self, identity: str, amount: int) -> None:
        """Take *amount* from *identity*, e.g. to pay for a purchase."""
        balance = self.balance_of(identity)
        if amount > balance:
            raise ValueError(
                f"{identity!r} has {balance}, cannot be charged {amount}."
            )
        self._balances[identity] = balance - amount

    def block(self, identity: str) -> None:
        """Make every future payment to *identity* fail."""
        self._blocked.add(identity)

    def unblock(self, identity: str) -> None:
        self._blocked.discard(identity)

    def on_receive(self, identity: str, hook: PaymentHook) -> None:
        """Run *hook* every time *identity* is paid."""
        self._payment_hooks.setdefault(identity, []).append(hook)

    def send(self, recipient: str, amount: int) -> bool:
        if recipient in self._blocked:
            logger.warning("Payment of %d to %s refused.", amount, recipient)
            return False
        previous = self.balance_of(recipient)
        self._balances[recipient] = previous + amount
        try:
            for hook in self._payment_hooks.get(recipient, []):
                hook(amount)
        except BaseException:
            # A failing hook reverts the payment it was notified of.
            self._balances[recipient] = previous
            raise
        return True
