from datetime import datetime
from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    show_id: int
    selected_seats: list[str] = Field(min_length=1)


class Booking(BaseModel):
    id: int
    user_id: str | None = None
    show_id: int
    amount: float
    booked_seats: list[str]
    is_paid: bool
    payment_link: str | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class BookingCreated(BaseModel):
    booking: Booking
    payment_url: str | None = None
    reservation_expires_at: datetime


class BookingStatus(BaseModel):
    booking_id: int
    state: str
