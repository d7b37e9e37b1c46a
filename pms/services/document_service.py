"""Generation of final exit documents.

Each employee has at most one document per type; generating again returns the
existing document, so retries never duplicate it.
"""

import logging
from datetime import date, datetime
from typing import Any

from pms.core import db_client
from pms.core.config import constants
from pms.core.errors import NotFoundError
from pms.core.logging import span
from pms.domain.offboarding import FinalDocument
from pms.services import settlement_service


logger = logging.getLogger(__name__)


FINAL_SETTLEMENT_DOCUMENT = "final_settlement"


def document_url(*, employee_id: str, document_type: str) -> str:
    """Download path of a generated document."""
    return f"{constants.API_PREFIX}/offboarding/documents/{employee_id}/{document_type}"


def _to_document(record: dict[str, Any]) -> FinalDocument:
    return FinalDocument(type=record["type"], url=record["url"], generated_at=record["generated_at"])


async def generate_final_documents(*, employee_id: str, exit_date: date | None = None) -> list[FinalDocument]:
    """Generate the final settlement document for an employee, reusing an existing one.

    Raises:
        EmployeeNotFoundError: If the employee does not exist
        InsufficientDataError: If the settlement cannot be calculated
    """
    with span("document_service.generate_final_documents"):
        existing = await db_client.get_first_record(
            collection="documents",
            filter_query=(
                f'employee_id = "{db_client.sanitize_param(employee_id)}" && type = "{FINAL_SETTLEMENT_DOCUMENT}"'
            ),
        )
        if existing:
            logger.info("Final documents already generated for %s, reusing", employee_id)
            return [_to_document(existing)]

        breakdown = await settlement_service.calculate_final_settlement(employee_id=employee_id, exit_date=exit_date)

        record = await db_client.create_record(
            collection="documents",
            data={
                "employee_id": employee_id,
                "type": FINAL_SETTLEMENT_DOCUMENT,
                "url": document_url(employee_id=employee_id, document_type=FINAL_SETTLEMENT_DOCUMENT),
                "breakdown": breakdown.model_dump(mode="json"),
                "generated_at": datetime.now().isoformat(),
            },
        )

        logger.info("Generated final documents for %s", employee_id)
        return [_to_document(record)]


async def get_document(*, employee_id: str, document_type: str) -> dict[str, Any]:
    """Fetch a generated document including its settlement breakdown.

    Raises:
        NotFoundError: If no such document has been generated
    """
    record = await db_client.get_first_record(
        collection="documents",
        filter_query=(
            f'employee_id = "{db_client.sanitize_param(employee_id)}" '
            f'&& type = "{db_client.sanitize_param(document_type)}"'
        ),
    )
    if record is None:
        msg = f"No {document_type} document for employee {employee_id}"
        raise NotFoundError(msg)
    return record
