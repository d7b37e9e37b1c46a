"""pms-lifecycle - Employee onboarding and offboarding service for the PMS payroll system."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pms.core.db_client import close_connection, init_db
from pms.core.errors import LifecycleError
from pms.core.logging import configure_logfire, instrument_fastapi
from pms.interface.employees_router import router as employees_router
from pms.interface.offboarding_router import router as offboarding_router
from pms.interface.onboarding_router import router as onboarding_router
from pms.interface.responses import lifecycle_error_handler, request_validation_error_handler


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Startup
    configure_logfire()

    await init_db()
    logger.info("Database initialized")

    yield
    # Shutdown
    await close_connection()


app = FastAPI(
    title="pms-lifecycle",
    description="Employee onboarding and offboarding for the PMS payroll system",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

app.add_exception_handler(LifecycleError, lifecycle_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

# Register routers
app.include_router(employees_router)
app.include_router(onboarding_router)
app.include_router(offboarding_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy"}, status_code=200)
