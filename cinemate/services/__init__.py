from . import (
    booking_service,
    notification_service,
    payment_gate,
    seat_ledger,
    user_service,
)
__all__ = [
    "booking_service",
    "notification_service",
    "payment_gate",
    "seat_ledger",
    "user_service",
]
