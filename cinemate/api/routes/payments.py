from fastapi import APIRouter, Depends, Header, HTTPException
from ...api import deps
from ...config import get_settings
from ...events import EventBus, PaymentCompleted
from ...services.errors import TransientStoreFailure
from ...services.payments import gateway

router = APIRouter(prefix="/payments", tags=["payments"])

PAID_STATUSES = {"succeeded", "paid"}


@router.post("/webhook")
def payments_webhook(
    payload: dict,
    bus: EventBus = Depends(deps.get_event_bus),
    x_webhook_secret: str | None = Header(default=None),
):
    settings = get_settings()
    if settings.payment_webhook_secret and x_webhook_secret != settings.payment_webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid webhook signature")
    gateway_client = gateway.get_gateway(settings)
    try:
        parsed = gateway_client.parse_webhook(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="Invalid webhook") from exc
    booking_id = parsed.get("booking_id")
    if booking_id is None:
        raise HTTPException(status_code=400, detail="Invalid webhook")
    if parsed.get("status") not in PAID_STATUSES:
        return {"status": "ignored"}
    try:
        bus.publish(PaymentCompleted(booking_id=booking_id))
    except TransientStoreFailure as exc:
        raise HTTPException(status_code=503, detail="Try again later") from exc
    return {"status": "ok"}
