from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.api.health import router as health_router
from marketplace.api.routes_cart import router as cart_router
from marketplace.api.routes_notifications import router as notifications_router
from marketplace.api.routes_order import router as order_router
from marketplace.config import settings
from marketplace.db import SessionLocal, init_db
from marketplace.db.seed import seed_dev_data
from marketplace.services.exceptions import StorageError
from marketplace.services.order_service import OrderService
from marketplace.utils.logging import get_logger

log = get_logger("main")


def expire_job():
    db = SessionLocal()
    try:
        ids = OrderService(db).expire_unpaid_orders()
        if ids:
            log.info("released reservations of %s unpaid orders: %s", len(ids), ids)
    except StorageError:
        log.exception("reservation sweep failed")
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    init_db()
    if not settings.SKIP_SEED:
        db = SessionLocal()
        try:
            seed_dev_data(db)
        finally:
            db.close()

    scheduler = None
    if settings.RESERVATION_SWEEP_ENABLED:
        scheduler = BackgroundScheduler()
        scheduler.add_job(
            expire_job,
            "interval",
            seconds=settings.RESERVATION_SWEEP_SECONDS,
            id="expire_reservations",
        )
        scheduler.start()

    try:
        yield
    finally:
        if scheduler:
            scheduler.shutdown(wait=False)


app = FastAPI(title="Marketplace - Backend", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    log.error("storage error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": str(exc)})


app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(cart_router, tags=["cart"])

app.include_router(order_router, prefix="/api/orders", tags=["orders"])

app.include_router(notifications_router, tags=["notifications"])
