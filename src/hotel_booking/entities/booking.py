"""Booking domain entity."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any


class BookingStatus(str, Enum):
    """Lifecycle states of a booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked-in"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Only these statuses occupy a room for conflict purposes
ACTIVE_STATUSES: frozenset[BookingStatus] = frozenset(
    {BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN}
)


@dataclass(frozen=True)
class BookingEntity:
    """A reservation of one room over a half-open date range.

    The stay covers ``[check_in, check_out)``: the guest leaves on the
    check-out date, so another stay may start that same day.
    """

    user_id: str
    room_id: str
    check_in: date
    check_out: date
    status: BookingStatus = BookingStatus.CONFIRMED
    id: str | None = None
    room_name: str | None = None
    guest_count: int = 1
    guest_information: dict[str, Any] = field(default_factory=dict)
    total_amount: float | None = None
    price_per_night: float | None = None
    confirmation_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None

    @property
    def is_active(self) -> bool:
        """Whether this booking blocks its dates."""
        return self.status in ACTIVE_STATUSES
