"""Payment status of a booking: ``Pending`` until paid or released.

Both transitions out of ``Pending`` are single conditional statements keyed
on ``is_paid = false``, so a payment racing the expiry check resolves to
exactly one terminal state. A released booking no longer exists; paying it
afterwards reports ``not_found`` instead of bringing it back.
"""

from enum import Enum
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from ..config import get_settings
from ..db import models
from . import seat_ledger

logger = logging.getLogger(__name__)


class BookingState(str, Enum):
    pending = "pending"
    paid = "paid"
    released = "released"


class GateOutcome(str, Enum):
    released = "released"
    already_paid = "already_paid"
    not_found = "not_found"


class PaymentOutcome(str, Enum):
    paid = "paid"
    already_paid = "already_paid"
    not_found = "not_found"


def get_state(db: Session, booking_id: int) -> BookingState:
    is_paid = db.scalar(select(models.Booking.is_paid).where(models.Booking.id == booking_id))
    if is_paid is None:
        return BookingState.released
    return BookingState.paid if is_paid else BookingState.pending


def _booking_exists(db: Session, booking_id: int) -> bool:
    return db.scalar(select(models.Booking.id).where(models.Booking.id == booking_id)) is not None


def release_if_unpaid(db: Session, booking_id: int) -> GateOutcome:
    settings = get_settings()

    def release() -> GateOutcome:
        row = db.execute(
            select(models.Booking.show_id, models.Booking.booked_seats).where(
                models.Booking.id == booking_id
            )
        ).first()
        if row is None:
            return GateOutcome.not_found
        deleted = db.execute(
            delete(models.Booking)
            .where(models.Booking.id == booking_id, models.Booking.is_paid.is_(False))
            .execution_options(synchronize_session=False)
        ).rowcount
        if not deleted:
            return GateOutcome.already_paid if _booking_exists(db, booking_id) else GateOutcome.not_found
        show = seat_ledger.lock_show(db, row.show_id)
        if show is not None:
            seat_ledger.release(show, row.booked_seats)
        return GateOutcome.released

    outcome = seat_ledger.run_atomically(db, release, attempts=settings.ledger_retry_attempts)
    logger.info("Expiry check finished", extra={"booking_id": booking_id, "outcome": outcome.value})
    return outcome


def mark_paid(db: Session, booking_id: int) -> PaymentOutcome:
    def settle() -> PaymentOutcome:
        updated = db.execute(
            update(models.Booking)
            .where(models.Booking.id == booking_id, models.Booking.is_paid.is_(False))
            .values(is_paid=True, payment_link=None)
            .execution_options(synchronize_session=False)
        ).rowcount
        if updated:
            return PaymentOutcome.paid
        if _booking_exists(db, booking_id):
            return PaymentOutcome.already_paid
        return PaymentOutcome.not_found

    outcome = seat_ledger.run_atomically(db, settle, attempts=1)
    if outcome == PaymentOutcome.not_found:
        logger.warning("Payment completed for a released booking", extra={"booking_id": booking_id})
    else:
        logger.info("Payment recorded", extra={"booking_id": booking_id, "outcome": outcome.value})
    return outcome
