from .bus import EventBus
from .types import (
    BookingCreated,
    Event,
    PaymentCompleted,
    ShowBooked,
    UserCreated,
    UserDeleted,
    UserUpdated,
)

__all__ = [
    "EventBus",
    "Event",
    "BookingCreated",
    "PaymentCompleted",
    "ShowBooked",
    "UserCreated",
    "UserDeleted",
    "UserUpdated",
]
