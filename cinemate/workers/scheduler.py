"""Durable scheduling of seat-hold expiry checks.

Each booking gets exactly one date-triggered job whose id is derived from the
booking id. Jobs live in a SQLAlchemy job store, so a check scheduled before
a restart still fires afterwards, however late.
"""

from datetime import datetime, timedelta, timezone
import logging
import re

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.jobstores.base import ConflictingIdError
from apscheduler.jobstores.sqlalchemy import SQLAlchemyJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.schedulers.base import BaseScheduler

from ..config import Settings
from ..core.constants import RELEASE_SEATS_JOB_FUNC, RELEASE_SEATS_JOB_PREFIX
from ..services.errors import TransientStoreFailure

logger = logging.getLogger(__name__)

_JOB_ID_PATTERN = re.compile(
    rf"^{RELEASE_SEATS_JOB_PREFIX}-(?P<booking_id>\d+)(?:-retry-(?P<attempt>\d+))?$"
)


def expiry_job_id(booking_id: int, attempt: int = 1) -> str:
    if attempt <= 1:
        return f"{RELEASE_SEATS_JOB_PREFIX}-{booking_id}"
    return f"{RELEASE_SEATS_JOB_PREFIX}-{booking_id}-retry-{attempt}"


class HoldExpiryScheduler:
    def __init__(
        self,
        scheduler: BaseScheduler,
        *,
        retry_delay: timedelta,
        max_attempts: int,
    ) -> None:
        self.scheduler = scheduler
        self.retry_delay = retry_delay
        self.max_attempts = max_attempts
        scheduler.add_listener(self.handle_job_error, EVENT_JOB_ERROR)

    def schedule_expiry(self, booking_id: int, delay: timedelta, *, attempt: int = 1) -> str:
        job_id = expiry_job_id(booking_id, attempt)
        if self.scheduler.get_job(job_id) is not None:
            logger.info("Expiry check already scheduled", extra={"job_id": job_id})
            return job_id
        run_date = datetime.now(timezone.utc) + max(delay, timedelta(0))
        try:
            self.scheduler.add_job(
                RELEASE_SEATS_JOB_FUNC,
                trigger="date",
                run_date=run_date,
                args=[booking_id],
                id=job_id,
                name=f"Release seats of booking {booking_id}",
                misfire_grace_time=None,
                coalesce=True,
                replace_existing=False,
            )
        except ConflictingIdError:
            logger.info("Expiry check already scheduled", extra={"job_id": job_id})
            return job_id
        logger.info(
            "Scheduled expiry check",
            extra={"job_id": job_id, "booking_id": booking_id, "run_date": run_date.isoformat()},
        )
        return job_id

    def handle_job_error(self, event: JobExecutionEvent) -> None:
        match = _JOB_ID_PATTERN.match(event.job_id)
        if match is None:
            return
        booking_id = int(match.group("booking_id"))
        attempt = int(match.group("attempt") or 1)
        if not isinstance(event.exception, TransientStoreFailure):
            logger.error(
                "Expiry check failed permanently",
                extra={"job_id": event.job_id, "booking_id": booking_id},
            )
            return
        if attempt >= self.max_attempts:
            logger.error(
                "Giving up on expiry check after %s attempts",
                attempt,
                extra={"job_id": event.job_id, "booking_id": booking_id},
            )
            return
        logger.warning(
            "Expiry check hit a transient store failure, retrying",
            extra={"job_id": event.job_id, "booking_id": booking_id, "attempt": attempt},
        )
        self.schedule_expiry(booking_id, self.retry_delay, attempt=attempt + 1)


def get_scheduler(settings: Settings) -> AsyncIOScheduler:
    return AsyncIOScheduler(
        jobstores={"default": SQLAlchemyJobStore(url=settings.jobstore_url)},
        timezone=timezone.utc,
    )


def get_expiry_scheduler(scheduler: BaseScheduler, settings: Settings) -> HoldExpiryScheduler:
    return HoldExpiryScheduler(
        scheduler,
        retry_delay=timedelta(seconds=settings.expiry_retry_delay_seconds),
        max_attempts=settings.expiry_max_attempts,
    )
