"""Global reentrancy guard for marketplace operations.

One guard covers every mutating operation on a marketplace instance.
Re-entering it from the thread that already holds it (for example from an
asset receiver hook or a payout hook) fails fast with
``ReentrantCallError``.  Other threads wait for the running operation to
finish, so no two mutating calls ever interleave.
"""

from __future__ import annotations

import logging
import threading
from types import TracebackType

from marketledger.core.errors import ReentrantCallError

logger = logging.getLogger(__name__)


class ReentrancyGuard:
    """Context manager serializing guarded operations.

    Examples
    --------
    >>> guard = ReentrancyGuard()
    >>> with guard:
    ...     guard.entered
    True
    >>> guard.entered
    False
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._operation = ""

    @property
    def entered(self) -> bool:
        """Whether an operation currently holds the guard."""
        return self._owner is not None

    def enter(self, operation: str = "") -> None:
        if self._owner == threading.get_ident():
            logger.warning(
                "Rejected re-entrant call to %s while %s is in flight.",
                operation or "guarded operation",
                self._operation or "another operation",
            )
            raise ReentrantCallError(
                f"Re-entrant call to {operation or 'guarded operation'} "
                f"rejected while {self._operation or 'another operation'} is in flight."
            )
        self._lock.acquire()
        self._owner = threading.get_ident()
        self._operation = operation

    def exit(self) -> None:
        self._owner = None
        self._operation = ""
        self._lock.release()

    def __call__(self, operation: str) -> _GuardedSection:
        """Return a context manager that labels the guarded section."""
        return _GuardedSection(self, operation)

    def __enter__(self) -> ReentrancyGuard:
        self.enter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.exit()


class _GuardedSection:
    def __init__(self, guard: ReentrancyGuard, operation: str) -> None:
        self._guard = guard
        self._operation = operation

    def __enter__(self) -> None:
        self._guard.enter(self._operation)

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._guard.exit()
