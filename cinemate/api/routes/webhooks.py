from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import ValidationError
from ...api import deps
from ...config import get_settings
from ...db import schemas
from ...events import EventBus, UserCreated, UserDeleted, UserUpdated

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/identity")
def identity_webhook(
    payload: schemas.IdentityWebhook,
    bus: EventBus = Depends(deps.get_event_bus),
    x_webhook_secret: str | None = Header(default=None),
):
    settings = get_settings()
    if settings.identity_webhook_secret and x_webhook_secret != settings.identity_webhook_secret:
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if payload.type == "user.deleted":
        user_id = payload.data.get("id")
        if not user_id:
            raise HTTPException(status_code=400, detail="Invalid webhook")
        bus.publish(UserDeleted(user_id=user_id))
        return {"status": "ok"}

    if payload.type not in ("user.created", "user.updated"):
        return {"status": "ignored"}
    try:
        data = schemas.IdentityUserData.model_validate(payload.data)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail="Invalid webhook") from exc
    event_type = UserCreated if payload.type == "user.created" else UserUpdated
    bus.publish(
        event_type(
            user_id=data.id,
            email=data.primary_email,
            full_name=data.full_name,
            image=data.image_url,
        )
    )
    return {"status": "ok"}
