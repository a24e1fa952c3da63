import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.routes import admin, bookings, misc, payments, shows, webhooks
from .db.session import Base, engine, SessionLocal
from .config import get_settings
from .events import EventBus
from .workers.expiry import recover_pending_holds
from .workers.handlers import register_handlers
from .workers.scheduler import get_expiry_scheduler, get_scheduler

logger = logging.getLogger(__name__)

app = FastAPI(title="Cinemate API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(shows.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")
app.include_router(payments.router, prefix="/api/v1")
app.include_router(webhooks.router, prefix="/api/v1")
app.include_router(admin.router, prefix="/api/v1")
app.include_router(misc.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    Base.metadata.create_all(bind=engine)

    scheduler = get_scheduler(settings)
    expiry_scheduler = get_expiry_scheduler(scheduler, settings)
    bus = EventBus()
    register_handlers(bus, expiry_scheduler, SessionLocal, settings.seat_hold_timeout)
    scheduler.start()
    with SessionLocal() as session:
        recover_pending_holds(session, expiry_scheduler, settings.seat_hold_timeout)

    app.state.event_bus = bus
    app.state.scheduler = scheduler
    logger.info("Cinemate API started", extra={"env": settings.env})


@app.on_event("shutdown")
async def shutdown_event() -> None:
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)
