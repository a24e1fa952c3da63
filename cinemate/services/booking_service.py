from datetime import datetime, timezone
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..config import Settings, get_settings
from ..db import models
from ..events import BookingCreated, EventBus
from . import payment_gate, seat_ledger
from .errors import BookingError, TransientStoreFailure
from .payments import gateway

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _show_starts_in_future(show: models.Show) -> bool:
    show_datetime = show.show_datetime
    if show_datetime.tzinfo is None:
        show_datetime = show_datetime.replace(tzinfo=timezone.utc)
    return show_datetime > _utc_now()


def create_booking(
    db: Session,
    bus: EventBus,
    user: models.User,
    show_id: int,
    seats: list[str],
) -> models.Booking:
    requested = list(dict.fromkeys(seat.strip() for seat in seats if seat.strip()))
    if not requested:
        raise BookingError("No seats selected")
    settings = get_settings()

    def reserve_and_record() -> models.Booking:
        show = seat_ledger.lock_show(db, show_id)
        if show is None:
            raise BookingError("Show not found")
        if not _show_starts_in_future(show):
            raise BookingError("Show has already started")
        seat_ledger.reserve(show, requested, user.id)
        booking = models.Booking(
            user_id=user.id,
            show_id=show.id,
            amount=show.show_price * len(requested),
            booked_seats=requested,
            is_paid=False,
            created_at=_utc_now(),
        )
        db.add(booking)
        db.flush()
        return booking

    booking = seat_ledger.run_atomically(
        db, reserve_and_record, attempts=settings.ledger_retry_attempts
    )
    logger.info(
        "Seats reserved",
        extra={"booking_id": booking.id, "show_id": show_id, "seats": requested},
    )

    try:
        bus.publish(BookingCreated(booking_id=booking.id, created_at=booking.created_at))
    except Exception as exc:
        logger.exception("Could not schedule hold expiry", extra={"booking_id": booking.id})
        payment_gate.release_if_unpaid(db, booking.id)
        raise TransientStoreFailure("Could not schedule hold expiry") from exc

    _attach_payment_link(db, booking, settings)
    return booking


def _attach_payment_link(db: Session, booking: models.Booking, settings: Settings) -> None:
    # The hold is already scheduled; without a link the booking simply expires.
    booking_id = booking.id
    try:
        checkout = gateway.get_gateway(settings).create_checkout(
            booking_id=booking_id,
            amount=float(booking.amount),
            currency=settings.payment_currency,
            description=f"Movie tickets, booking #{booking_id}",
            return_url=settings.payment_return_url,
        )
        payment_link = checkout.get("checkout_url")
        if payment_link:
            booking.payment_link = payment_link
            db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to create checkout", extra={"booking_id": booking_id})


def list_user_bookings(db: Session, user_id: str) -> list[models.Booking]:
    stmt = (
        select(models.Booking)
        .options(selectinload(models.Booking.show).selectinload(models.Show.movie))
        .where(models.Booking.user_id == user_id)
        .order_by(models.Booking.created_at.desc())
    )
    return list(db.execute(stmt).scalars().all())
