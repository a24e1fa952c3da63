from datetime import datetime, timedelta, timezone
import logging
from typing import Callable

from sqlalchemy.orm import Session

from ..events import (
    BookingCreated,
    EventBus,
    PaymentCompleted,
    ShowBooked,
    UserCreated,
    UserDeleted,
    UserUpdated,
)
from ..services import notification_service, payment_gate, user_service
from .expiry import hold_expires_at
from .scheduler import HoldExpiryScheduler

logger = logging.getLogger(__name__)


def register_handlers(
    bus: EventBus,
    expiry_scheduler: HoldExpiryScheduler,
    session_factory: Callable[[], Session],
    hold: timedelta,
) -> None:
    def sync_user_creation(event: UserCreated) -> None:
        with session_factory() as db:
            user_service.create_user(db, event)

    def sync_user_update(event: UserUpdated) -> None:
        with session_factory() as db:
            user_service.update_user(db, event)

    def sync_user_deletion(event: UserDeleted) -> None:
        with session_factory() as db:
            user_service.delete_user(db, event)

    def schedule_seat_release(event: BookingCreated) -> None:
        delay = hold_expires_at(event.created_at, hold) - datetime.now(timezone.utc)
        expiry_scheduler.schedule_expiry(event.booking_id, delay)

    def complete_payment(event: PaymentCompleted) -> None:
        with session_factory() as db:
            outcome = payment_gate.mark_paid(db, event.booking_id)
        if outcome == payment_gate.PaymentOutcome.paid:
            bus.publish(ShowBooked(booking_id=event.booking_id))

    def send_booking_confirmation_email(event: ShowBooked) -> None:
        with session_factory() as db:
            sent = notification_service.send_booking_confirmation(db, event.booking_id)
        if not sent:
            logger.warning("Booking confirmation not sent", extra={"booking_id": event.booking_id})

    bus.subscribe(UserCreated, sync_user_creation)
    bus.subscribe(UserUpdated, sync_user_update)
    bus.subscribe(UserDeleted, sync_user_deletion)
    bus.subscribe(BookingCreated, schedule_seat_release)
    bus.subscribe(PaymentCompleted, complete_payment)
    bus.subscribe(ShowBooked, send_booking_confirmation_email)
