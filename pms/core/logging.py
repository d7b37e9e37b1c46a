"""Logging and observability configuration using Pydantic Logfire.

All modules use Python's standard logging library (logging.getLogger(__name__));
Logfire captures and enriches these records once configured.

Standard usage:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Message", extra={"key": "value"})

Service-layer spans:
    with span("offboarding_service.complete_task"):
        ...
"""

import logging

import logfire
from fastapi import FastAPI

from pms.core.config import settings


def configure_logfire() -> None:
    """Configure Pydantic Logfire with token from environment."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="pms-lifecycle",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
        console=False if settings.is_production else None,
    )

    logger = logging.getLogger(__name__)
    logger.info("Logfire configured successfully")


def instrument_fastapi(app: FastAPI) -> None:
    """Add Logfire instrumentation to FastAPI application."""
    logfire.instrument_fastapi(app)
    logger = logging.getLogger(__name__)
    logger.info("FastAPI instrumentation configured")


def span(name: str) -> logfire.LogfireSpan:
    """Create a custom span for service layer functions.

    Usage:
        with span("employee_service.archive_employee"):
            ...
    """
    return logfire.span(name)


def log_with_employee_context(
    logger: logging.Logger,
    level: str,
    message: str,
    employee_id: str | None = None,
    **extra: object,
) -> None:
    """Log a message tagged with the employee it concerns.

    Usage:
        log_with_employee_context(logger, "info", "Task toggled", employee_id="12", task="exit_interview")
    """
    context = {"employee_id": employee_id, **extra} if employee_id else extra
    log_method = getattr(logger, level.lower())
    log_method(message, extra=context)
