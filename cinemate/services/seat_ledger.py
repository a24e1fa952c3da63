"""Per-show occupant mapping.

A show's ``occupied_seats`` maps a seat id to the id of whoever holds it. A
seat is free exactly when its key is absent. The functions here mutate the
mapping inside the caller's transaction; ``run_atomically`` wraps a unit of
work so that it is committed as a whole and retried when another writer
changed the same show in between (the show row is versioned).
"""

from collections.abc import Callable, Iterable
import logging
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ..db import models
from .errors import SeatConflict, TransientStoreFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def lock_show(db: Session, show_id: int) -> models.Show | None:
    return (
        db.execute(
            select(models.Show)
            .where(models.Show.id == show_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalar_one_or_none()
    )


def occupied_seats(db: Session, show_id: int) -> dict[str, str]:
    occupied = db.scalar(select(models.Show.occupied_seats).where(models.Show.id == show_id))
    return dict(occupied or {})


def reserve(show: models.Show, seats: Iterable[str], holder: str) -> None:
    requested = list(dict.fromkeys(seats))
    occupied = dict(show.occupied_seats or {})
    taken = [seat for seat in requested if seat in occupied]
    if taken:
        raise SeatConflict(taken)
    for seat in requested:
        occupied[seat] = holder
    show.occupied_seats = occupied


def release(show: models.Show, seats: Iterable[str]) -> None:
    occupied = dict(show.occupied_seats or {})
    for seat in seats:
        occupied.pop(seat, None)
    if occupied != show.occupied_seats:
        show.occupied_seats = occupied


def run_atomically(db: Session, work: Callable[[], T], *, attempts: int) -> T:
    for attempt in range(1, attempts + 1):
        transaction_ctx = db.begin_nested() if db.in_transaction() else db.begin()
        try:
            with transaction_ctx:
                result = work()
            db.commit()
            return result
        except StaleDataError:
            db.rollback()
            logger.warning(
                "Show changed concurrently, retrying",
                extra={"attempt": attempt, "attempts": attempts},
            )
        except OperationalError as exc:
            db.rollback()
            raise TransientStoreFailure("Database is unavailable") from exc
    raise TransientStoreFailure(f"Show kept changing after {attempts} attempts")
