"""HTTP backend for the lifecycle store, talking to the PMS REST API via httpx."""

import logging
from typing import Any

import httpx

from pms.client.backend import LifecycleKind
from pms.core.config import constants, settings
from pms.core.errors import (
    InvalidInputError,
    InvalidTransitionError,
    LifecycleError,
    NotFoundError,
    PermissionDeniedError,
)


logger = logging.getLogger(__name__)


_STATUS_ERRORS: dict[int, type[LifecycleError]] = {
    constants.HTTP_NOT_FOUND: NotFoundError,
    constants.HTTP_FORBIDDEN: PermissionDeniedError,
    constants.HTTP_CONFLICT: InvalidTransitionError,
    constants.HTTP_UNPROCESSABLE: InvalidInputError,
}


def _error_message(response: httpx.Response) -> str:
    """Pull the message out of an error envelope, falling back to the raw body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("message") or str(body.get("detail") or body)
    return str(body)


class HttpBackend:
    """LifecycleBackend implementation over the REST API.

    Args:
        base_url: API root (defaults to settings.api_base_url)
        client: Pre-built AsyncClient, e.g. one bound to an ASGI app in tests
    """

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None) -> None:
        headers = {"Content-Type": "application/json"}
        if settings.api_token:
            headers["Authorization"] = f"Bearer {settings.api_token}"

        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            headers=headers,
            timeout=settings.api_timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: dict[str, Any] | None = None) -> Any:
        url = f"{constants.API_PREFIX}{path}"
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            logger.warning("Lifecycle API request failed: %s %s: %s", method, url, e)
            msg = f"Lifecycle API request failed: {e}"
            raise LifecycleError(msg) from e

        if response.is_success:
            return response.json()["data"]

        message = _error_message(response)
        logger.info("Lifecycle API error %s on %s %s: %s", response.status_code, method, url, message)
        error_type = _STATUS_ERRORS.get(response.status_code, LifecycleError)
        raise error_type(message)

    async def get_lifecycle(self, employee_id: str, kind: LifecycleKind) -> dict[str, Any]:
        if kind == LifecycleKind.ONBOARDING:
            return await self._request("GET", f"/onboarding/{employee_id}")
        return await self._request("GET", f"/offboarding/details/{employee_id}")

    async def save_task_completion(
        self,
        employee_id: str,
        kind: LifecycleKind,
        task_name: str,
        completed: bool,
        notes: str | None = None,
    ) -> dict[str, Any]:
        payload = {"completed": completed, "notes": notes}
        if kind == LifecycleKind.ONBOARDING:
            return await self._request("POST", f"/onboarding/{employee_id}/tasks/{task_name}", json=payload)
        data = await self._request("POST", f"/offboarding/complete-task/{employee_id}/{task_name}", json=payload)
        return data["record"]

    async def advance_stage(self, employee_id: str, expected_stage: str | None = None) -> dict[str, Any]:
        return await self._request("PUT", f"/onboarding/{employee_id}/stage", json={"expected_stage": expected_stage})

    async def archive_employee(self, employee_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/employees/{employee_id}/archive")

    async def remove_from_payroll(self, employee_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/employees/{employee_id}/remove-payroll")

    async def generate_final_documents(self, employee_id: str) -> list[dict[str, Any]]:
        return await self._request("POST", f"/employees/{employee_id}/generate-documents")
