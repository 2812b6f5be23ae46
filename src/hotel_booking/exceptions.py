"""Exceptions raised by services and repositories.

Handlers translate these into HTTP status codes. Room search does not
raise for bad queries or store failures; it returns typed results from
the entities package instead.
"""


class HotelBookingError(Exception):
    """Base class for all application errors."""


class NotFoundError(HotelBookingError):
    """A room or booking does not exist."""


class ForbiddenError(HotelBookingError):
    """The caller does not own the resource it is acting on."""


class ConflictError(HotelBookingError):
    """The requested dates overlap an active booking."""


class BookingValidationError(HotelBookingError):
    """A booking request or state transition is invalid."""


class RoomValidationError(HotelBookingError):
    """A room update carries no usable fields or invalid values."""


class StoreError(HotelBookingError):
    """The room or booking store failed to answer."""
