"""Events exchanged between the API and the background handlers.

Every event kind is its own frozen dataclass whose ``name`` tag identifies
it on the bus and in logs.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar


@dataclass(frozen=True, slots=True)
class UserCreated:
    name: ClassVar[str] = "identity/user.created"

    user_id: str
    email: str
    full_name: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class UserUpdated:
    name: ClassVar[str] = "identity/user.updated"

    user_id: str
    email: str
    full_name: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class UserDeleted:
    name: ClassVar[str] = "identity/user.deleted"

    user_id: str


@dataclass(frozen=True, slots=True)
class BookingCreated:
    name: ClassVar[str] = "app/checkpayment"

    booking_id: int
    created_at: datetime


@dataclass(frozen=True, slots=True)
class PaymentCompleted:
    name: ClassVar[str] = "app/payment.completed"

    booking_id: int


@dataclass(frozen=True, slots=True)
class ShowBooked:
    name: ClassVar[str] = "app/show.booked"

    booking_id: int


Event = UserCreated | UserUpdated | UserDeleted | BookingCreated | PaymentCompleted | ShowBooked
