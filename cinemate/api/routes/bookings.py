from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session
from ...api import deps
from ...config import get_settings
from ...db.session import get_db
from ...db import models, schemas
from ...events import EventBus
from ...services import booking_service, payment_gate
from ...services.errors import BookingError, SeatConflict, TransientStoreFailure

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=schemas.BookingCreated)
def create_booking(
    payload: schemas.BookingCreate,
    db: Session = Depends(get_db),
    bus: EventBus = Depends(deps.get_event_bus),
    user: models.User = Depends(deps.get_current_user),
):
    show = db.get(models.Show, payload.show_id)
    if not show:
        raise HTTPException(status_code=404, detail="Show not found")
    try:
        booking = booking_service.create_booking(
            db, bus, user, show.id, payload.selected_seats
        )
    except SeatConflict as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=str(exc)
        ) from exc
    except TransientStoreFailure as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Try again later"
        ) from exc
    except BookingError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    settings = get_settings()
    return schemas.BookingCreated(
        booking=schemas.Booking.model_validate(booking),
        payment_url=booking.payment_link,
        reservation_expires_at=booking.created_at + settings.seat_hold_timeout,
    )


@router.get("/me", response_model=list[schemas.Booking])
def list_my_bookings(
    db: Session = Depends(get_db),
    user: models.User = Depends(deps.get_current_user),
):
    return booking_service.list_user_bookings(db, user.id)


@router.get("/{booking_id}/status", response_model=schemas.BookingStatus)
def get_booking_status(
    booking_id: int,
    db: Session = Depends(get_db),
    user: models.User = Depends(deps.get_current_user),
):
    owner_id = db.scalar(select(models.Booking.user_id).where(models.Booking.id == booking_id))
    if owner_id is not None and owner_id != user.id:
        raise HTTPException(status_code=404, detail="Booking not found")
    state = payment_gate.get_state(db, booking_id)
    return schemas.BookingStatus(booking_id=booking_id, state=state.value)
