import importlib
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import timedelta

import sentry_sdk
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sentry_sdk.integrations.asgi import SentryAsgiMiddleware

from busbooking.config import Settings
from busbooking.db.session import Database
from busbooking.errors import BookingError
from busbooking.logging_setup import TRACE_ID_CTX, setup_logging
from busbooking.services.booking_service import BookingService
from busbooking.services.bus_catalog import BusCatalog
from busbooking.services.ledger import BookingLedger
from busbooking.services.seat_store import SeatAvailabilityStore
from busbooking.services.seed import seed_buses

logger = logging.getLogger(__name__)

# List of module names to include as routers
MODULES = [
    "auth",
    "buses",
    "bookings",
    "admin",
]


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed", extra={"error": exc.code, "detail": exc.message, "path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code, "detail": exc.message})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    database = Database(settings)
    catalog = BusCatalog(database)
    ledger = BookingLedger(database)
    seats = SeatAvailabilityStore(database, catalog)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.CREATE_SCHEMA_ON_STARTUP:
            await database.create_all()
        if settings.SEED_BUSES:
            await seed_buses(database, force=settings.FORCE_SEED)
        yield
        await database.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.catalog = catalog
    app.state.booking_service = BookingService(
        catalog, seats, ledger, reconcile_grace=timedelta(seconds=settings.RECONCILE_GRACE_SECONDS)
    )

    # initialize logging and Sentry
    setup_logging(settings.LOG_LEVEL, service=settings.APP_NAME)
    if settings.SENTRY_DSN:
        sentry_sdk.init(dsn=settings.SENTRY_DSN)
        app.add_middleware(SentryAsgiMiddleware)

    @app.middleware("http")
    async def add_trace_id(request: Request, call_next):
        trace_id = request.headers.get("x-trace-id") or str(uuid.uuid4())
        TRACE_ID_CTX.set(trace_id)
        response = await call_next(request)
        response.headers["X-Trace-Id"] = trace_id
        return response

    app.add_exception_handler(BookingError, booking_error_handler)

    for mod in MODULES:
        pkg = importlib.import_module(f"busbooking.modules.{mod}.router")
        app.include_router(pkg.router, prefix=f"/{mod}")

    @app.get("/")
    async def root():
        return {"app": settings.APP_NAME, "status": "ok"}

    @app.get("/metrics")
    async def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
