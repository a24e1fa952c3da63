from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from ...api import deps
from ...db.session import get_db
from ...db import models, schemas

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/bookings", response_model=list[schemas.Booking])
def list_bookings(
    show_id: int | None = None,
    user_id: str | None = None,
    db: Session = Depends(get_db),
    _: dict = Depends(deps.require_admin),
):
    query = db.query(models.Booking).options(
        selectinload(models.Booking.user),
        selectinload(models.Booking.show).selectinload(models.Show.movie),
    )
    if show_id:
        query = query.filter(models.Booking.show_id == show_id)
    if user_id:
        query = query.filter(models.Booking.user_id == user_id)
    return query.order_by(models.Booking.created_at.desc()).all()


@router.get("/dashboard")
def dashboard(db: Session = Depends(get_db), _: dict = Depends(deps.require_admin)):
    total_bookings = db.query(models.Booking).filter(models.Booking.is_paid.is_(True)).count()
    pending_bookings = db.query(models.Booking).filter(models.Booking.is_paid.is_(False)).count()
    total_revenue = (
        db.query(func.coalesce(func.sum(models.Booking.amount), 0))
        .filter(models.Booking.is_paid.is_(True))
        .scalar()
    )
    total_users = db.query(models.User).count()
    return {
        "total_bookings": total_bookings,
        "pending_bookings": pending_bookings,
        "total_revenue": float(total_revenue or 0),
        "total_users": total_users,
    }
