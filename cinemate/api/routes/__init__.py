from . import (
    admin,
    bookings,
    misc,
    payments,
    shows,
    webhooks,
)

__all__ = [
    "admin",
    "bookings",
    "misc",
    "payments",
    "shows",
    "webhooks",
]
