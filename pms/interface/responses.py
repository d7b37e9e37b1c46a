"""Response envelope shared by the REST routers."""

import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from pms.core.config import constants
from pms.core.errors import ErrorCode, LifecycleError, classify_error_with_response, http_status_for


logger = logging.getLogger(__name__)


def success(data: Any) -> dict[str, Any]:
    """Wrap a payload as `{"success": true, "data": ...}`."""
    return {"success": True, "data": jsonable_encoder(data)}


async def lifecycle_error_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Render a lifecycle error as the error envelope with its mapped status code."""
    response = classify_error_with_response(exc)
    status_code = http_status_for(exc)
    logger.info(
        "request_rejected",
        extra={"path": request.url.path, "code": response.code, "status_code": status_code, "error": str(exc)},
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "code": response.code,
            "message": response.message,
            "suggestion": response.suggestion,
        },
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request body/query validation failures in the same error envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=constants.HTTP_UNPROCESSABLE,
        content={
            "success": False,
            "code": ErrorCode.ERR_VALIDATION,
            "message": message,
            "suggestion": "Correct the highlighted fields and try again.",
            "errors": jsonable_encoder(errors),
        },
    )
