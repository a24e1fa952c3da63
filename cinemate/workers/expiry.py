from datetime import datetime, timedelta, timezone
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import models
from ..db.session import SessionLocal
from ..services import payment_gate
from .scheduler import HoldExpiryScheduler

logger = logging.getLogger(__name__)


def release_seats_and_delete_booking(booking_id: int) -> str:
    with SessionLocal() as db:
        outcome = payment_gate.release_if_unpaid(db, booking_id)
    return outcome.value


def hold_expires_at(created_at: datetime, hold: timedelta) -> datetime:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at + hold


def recover_pending_holds(db: Session, expiry_scheduler: HoldExpiryScheduler, hold: timedelta) -> int:
    now = datetime.now(timezone.utc)
    unpaid = db.execute(
        select(models.Booking.id, models.Booking.created_at).where(models.Booking.is_paid.is_(False))
    ).all()
    for booking_id, created_at in unpaid:
        expiry_scheduler.schedule_expiry(booking_id, hold_expires_at(created_at, hold) - now)
    if unpaid:
        logger.info("Recovered expiry checks for %s unpaid bookings", len(unpaid))
    return len(unpaid)
