"""Room domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoomEntity:
    """A bookable room as read from the room store.

    Only ``capacity``, ``price`` and ``available`` matter to availability
    resolution; the rest is passed through to callers.

    Attributes:
        id: Store-assigned room identifier
        name: Display name (e.g. "Deluxe Ocean View")
        room_type: Category such as "standard", "deluxe" or "suite"
        price: Nightly price
        capacity: Maximum number of guests
        available: Whether the room is open for booking
        max_occupancy: Hard occupancy limit, defaults to capacity
        description: Free-text description
        bed_type: Bed configuration (e.g. "king")
        room_number: Room number within the hotel
        hotel_id: Owning hotel
        amenities: Amenity labels
        images: Image URLs, first one is the cover image
    """

    id: str
    name: str
    room_type: str
    price: float
    capacity: int
    available: bool = True
    max_occupancy: int | None = None
    description: str = ""
    bed_type: str | None = None
    room_number: str | None = None
    hotel_id: str | None = None
    amenities: tuple[str, ...] = ()
    images: tuple[str, ...] = ()

    @property
    def cover_image(self) -> str:
        """First image, or the placeholder when the room has none."""
        return self.images[0] if self.images else "/placeholder-room.jpg"

    @property
    def subtitle(self) -> str:
        """Human readable room category, e.g. "Deluxe Room"."""
        label = self.room_type.capitalize() if self.room_type else "Standard"
        return f"{label} Room"
