"""FastAPI entrypoint for the Queue Desk backend.

Wires the routers, error handlers and the per-process ``AppContext``:
- `routes/` HTTP endpoints for customers and admins
- `services/` booking lifecycle, queue control, admin and reporting
- `catalog/` per-variant service catalogs
- `scheduler/` APScheduler housekeeping jobs
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from starlette.exceptions import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from queue_desk.core import config
from queue_desk.core.context import build_context
from queue_desk.core.domain_exceptions import DomainException
from queue_desk.core.exceptions import (
    domain_exception_handler,
    http_exception_handler,
    store_exception_handler,
)
from queue_desk.core.middleware import RequestContextMiddleware
from queue_desk.db.bootstrap import ensure_admin_profile
from queue_desk.db.init_db import init_db
from queue_desk.db.session import SessionLocal
from queue_desk.routes import auth, bookings, branches, catalog, queue, reports, users

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize app resources before serving traffic."""
    # Ensure SQL tables exist at app startup.
    init_db()
    logger.info("Database tables initialized.")

    db = SessionLocal()
    try:
        ensure_admin_profile(db)
    finally:
        db.close()

    context = build_context()
    context.start(enable_scheduler=config.ENABLE_SCHEDULER)
    app.state.context = context

    yield

    # Graceful shutdown.
    context.stop()
    logger.info("Application context stopped.")

app = FastAPI(
    title="Queue Desk API",
    version="0.1.0",
    description="Booking and walk-in queue backend for barbershop and laundry branches.",
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(SQLAlchemyError, store_exception_handler)

app.include_router(auth.router)
app.include_router(catalog.router)
app.include_router(bookings.router)
app.include_router(queue.router)
app.include_router(branches.router)
app.include_router(users.router)
app.include_router(reports.router)

@app.get("/", tags=["health"])
def root() -> dict[str, str]:
    """Simple status endpoint for uptime checks."""
    return {"status": "Queue Desk Running", "variant": config.VARIANT}
