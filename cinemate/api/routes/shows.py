from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from ...api import deps
from ...db.session import get_db
from ...db import models, schemas
from ...services import seat_ledger

router = APIRouter(prefix="/shows", tags=["shows"])


@router.get("", response_model=list[schemas.Show])
def list_shows(db: Session = Depends(get_db)):
    stmt = (
        select(models.Show)
        .options(selectinload(models.Show.movie))
        .where(models.Show.show_datetime >= datetime.now(timezone.utc))
        .order_by(models.Show.show_datetime)
    )
    return list(db.execute(stmt).scalars().all())


@router.post("", response_model=schemas.Show)
def add_show(
    payload: schemas.ShowCreate,
    db: Session = Depends(get_db),
    _: dict = Depends(deps.require_admin),
):
    movie = db.get(models.Movie, payload.movie_id)
    if not movie:
        raise HTTPException(status_code=404, detail="Movie not found")
    show = models.Show(
        movie_id=movie.id,
        show_datetime=payload.show_datetime,
        show_price=payload.show_price,
        occupied_seats={},
    )
    db.add(show)
    db.commit()
    db.refresh(show)
    return show


@router.get("/{show_id}", response_model=schemas.Show)
def get_show(show_id: int, db: Session = Depends(get_db)):
    show = db.get(models.Show, show_id)
    if not show:
        raise HTTPException(status_code=404, detail="Show not found")
    return show


@router.get("/{show_id}/occupied-seats", response_model=schemas.OccupiedSeats)
def get_occupied_seats(show_id: int, db: Session = Depends(get_db)):
    if not db.get(models.Show, show_id):
        raise HTTPException(status_code=404, detail="Show not found")
    occupied = seat_ledger.occupied_seats(db, show_id)
    return schemas.OccupiedSeats(show_id=show_id, occupied_seats=sorted(occupied))
