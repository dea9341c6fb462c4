"""Request epochs and cancellation tokens.

Every aggregation attempt runs under a ticket issued by :class:`RequestEpoch`.
Issuing a new ticket cancels the previous one; an attempt may only commit
while its ticket is still the current one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from reportcal.models.calendar import MonthKey


class CancellationToken:
    """Cooperative cancellation flag shared by one aggregation attempt."""

    __slots__ = ("_cancelled", "_reason")

    def __init__(self) -> None:
        self._cancelled = False
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "") -> None:
        if self._cancelled:
            return
        self._reason = reason
        self._cancelled = True


@dataclass(frozen=True, slots=True, weakref_slot=True)
class EpochTicket:
    """Identity of one aggregation attempt."""

    number: int
    month: MonthKey
    token: CancellationToken = field(compare=False)


class RequestEpoch:
    """Monotonic marker of the currently relevant request."""

    def __init__(self) -> None:
        self._number = 0
        self._current: EpochTicket | None = None

    @property
    def number(self) -> int:
        return self._number

    @property
    def current(self) -> EpochTicket | None:
        return self._current

    @property
    def active_month(self) -> MonthKey | None:
        return self._current.month if self._current is not None else None

    def advance(self, month: MonthKey) -> EpochTicket:
        """Issue a ticket for ``month``, superseding (and cancelling) the previous one."""
        previous = self._current
        if previous is not None:
            previous.token.cancel(f"superseded by {month}")
        self._number += 1
        ticket = EpochTicket(number=self._number, month=month, token=CancellationToken())
        self._current = ticket
        return ticket

    def is_current(self, ticket: EpochTicket) -> bool:
        current = self._current
        return current is not None and current.number == ticket.number and not ticket.token.cancelled

    def cancel(self, reason: str = "closed") -> None:
        """Cancel the current ticket without issuing a new one."""
        if self._current is not None:
            self._current.token.cancel(reason)
