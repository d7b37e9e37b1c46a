from pms.services import (
    document_service,
    employee_service,
    listing_service,
    notification_service,
    settlement_service,
)


__all__ = [
    "document_service",
    "employee_service",
    "listing_service",
    "notification_service",
    "settlement_service",
]
