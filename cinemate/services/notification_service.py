from __future__ import annotations

from datetime import datetime, timezone
from html import escape
import logging
from dataclasses import dataclass
from zoneinfo import ZoneInfo

import httpx
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..config import get_settings
from ..db import models
from .errors import BookingNotFound

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EmailMessage:
    to: str
    subject: str
    html: str


def _local_show_time(show_datetime: datetime) -> datetime:
    settings = get_settings()
    if show_datetime.tzinfo is None:
        show_datetime = show_datetime.replace(tzinfo=timezone.utc)
    return show_datetime.astimezone(ZoneInfo(settings.timezone))


def build_booking_confirmation(booking: models.Booking) -> EmailMessage:
    settings = get_settings()
    title = booking.show.movie.title
    local_dt = _local_show_time(booking.show.show_datetime)
    seats = ", ".join(booking.booked_seats)
    booking_url = f"{settings.app_base_url.rstrip('/')}/bookings/{booking.id}"
    html = f"""<div style="font-family: 'Segoe UI', Roboto, sans-serif; background-color: #f5f7fa; padding: 30px;">
  <div style="max-width: 600px; margin: auto; background-color: #ffffff; border-radius: 8px;">
    <div style="background-color: #F84565; padding: 20px; text-align: center;">
      <h1 style="color: #ffffff; margin: 0; font-size: 24px;">Your Booking is Confirmed!</h1>
    </div>
    <div style="padding: 30px;">
      <p>Hi <strong>{escape(booking.user.name)}</strong>,</p>
      <p>Thank you for booking with <strong>Cinemate</strong>. Your ticket for
        <strong>"{escape(title)}"</strong> has been successfully confirmed.</p>
      <div style="border: 1px solid #eee; border-radius: 6px; padding: 20px; margin-bottom: 25px;">
        <p><strong>Movie:</strong> {escape(title)}</p>
        <p><strong>Date:</strong> {local_dt.strftime("%m/%d/%Y")}</p>
        <p><strong>Time:</strong> {local_dt.strftime("%I:%M %p")}</p>
        <p><strong>Seats:</strong> {escape(seats)}</p>
      </div>
      <div style="text-align: center;">
        <a href="{booking_url}" style="background-color: #F84565; color: #fff; padding: 12px 25px;">View Booking</a>
      </div>
    </div>
  </div>
</div>"""
    return EmailMessage(
        to=booking.user.email,
        subject=f'Payment Confirmation: "{title}" booked!',
        html=html,
    )


def send_email(message: EmailMessage) -> bool:
    settings = get_settings()
    if not settings.mail_api_key:
        logger.warning("Mail API key is not configured; skipping email", extra={"to": message.to})
        return False

    with httpx.Client(timeout=10) as client:
        try:
            response = client.post(
                settings.mail_api_url,
                headers={"api-key": settings.mail_api_key, "accept": "application/json"},
                json={
                    "sender": {"email": settings.mail_sender, "name": "Cinemate"},
                    "to": [{"email": message.to}],
                    "subject": message.subject,
                    "htmlContent": message.html,
                },
            )
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Failed to send email", extra={"to": message.to})
            return False
    return True


def send_booking_confirmation(db: Session, booking_id: int) -> bool:
    booking = db.execute(
        select(models.Booking)
        .options(
            selectinload(models.Booking.user),
            selectinload(models.Booking.show).selectinload(models.Show.movie),
        )
        .where(models.Booking.id == booking_id)
    ).scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)
    return send_email(build_booking_confirmation(booking))
