"""Pure Python in-memory database for unit testing."""

import copy
from datetime import datetime
from typing import Any

from pms.core.db_client import DatabaseError, RecordNotFoundError


class InMemoryDBClient:
    """In-memory stand-in for the pms.core.db_client module functions.

    Records are stored as given (JSON-shaped dicts), keyed by string ids that
    increase with insertion order. Supports the `=`, `!=` and `~` filters joined
    with `&&`, and `field` / `-field` sorting.
    """

    def __init__(self):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._id_counter = 1000
        self.fail_on: dict[tuple[str, str], Exception] = {}

    def _check_failure(self, operation: str, collection: str) -> None:
        error = self.fail_on.get((operation, collection))
        if error is not None:
            raise error

    def records(self, collection: str) -> list[dict[str, Any]]:
        """All records of a collection in insertion order (test helper)."""
        return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a record with id, created and updated fields."""
        if not isinstance(data, dict):
            raise DatabaseError(f"Data must be a dictionary, got {type(data)}")
        self._check_failure("create", collection)

        record_id = str(self._id_counter)
        self._id_counter += 1
        now = datetime.now().isoformat()

        record = {"id": record_id, "created": now, "updated": now, **copy.deepcopy(data)}
        self._collections.setdefault(collection, {})[record_id] = record
        return copy.deepcopy(record)

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Get a record by id, raising RecordNotFoundError if missing."""
        if not isinstance(record_id, str):
            raise DatabaseError(f"Record ID must be a string, got {type(record_id)}")

        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        return copy.deepcopy(records[record_id])

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Merge data into an existing record."""
        self._check_failure("update", collection)
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

        record = records[record_id]
        record.update(copy.deepcopy(data))
        record["updated"] = datetime.now().isoformat()
        return copy.deepcopy(record)

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record, raising RecordNotFoundError if missing."""
        records = self._collections.get(collection, {})
        if record_id not in records:
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")
        del records[record_id]

    async def list_records(
        self,
        *,
        collection: str,
        page: int = 1,
        per_page: int = 50,
        filter_query: str = "",
        sort: str = "",
    ) -> list[dict[str, Any]]:
        """List records with optional filtering, sorting and pagination."""
        records = list(self._collections.get(collection, {}).values())

        if filter_query:
            records = [r for r in records if self._parse_filter(filter_query, r)]

        if sort:
            records = self._apply_sort(records, sort)

        start_idx = (page - 1) * per_page
        return [copy.deepcopy(r) for r in records[start_idx : start_idx + per_page]]

    async def get_first_record(self, *, collection: str, filter_query: str) -> dict[str, Any] | None:
        """Get the first matching record or None."""
        records = await self.list_records(collection=collection, filter_query=filter_query)
        return records[0] if records else None

    def _parse_filter(self, filter_str: str, record: dict[str, Any]) -> bool:
        """Evaluate a filter expression against a record."""
        if "&&" in filter_str:
            return all(self._parse_filter(cond.strip(), record) for cond in filter_str.split("&&"))

        for operator in ("!=", "~", "="):
            if operator in filter_str:
                field, value = (part.strip() for part in filter_str.split(operator, 1))
                value = value.strip("'\"")
                actual = record.get(field)
                actual_str = "" if actual is None else str(actual)
                if operator == "!=":
                    return actual_str != value
                if operator == "~":
                    return value.lower() in actual_str.lower()
                return actual_str == value

        raise DatabaseError(f"Invalid filter syntax (no operator found): {filter_str}")

    def _apply_sort(self, records: list[dict], sort: str) -> list[dict]:
        """Sort records by field (prefix with - for descending); ids sort numerically."""
        reverse = sort.startswith("-")
        field = sort.lstrip("-")

        def key(record: dict) -> Any:
            value = record.get(field)
            if field == "id":
                return int(value)
            return "" if value is None else value

        return sorted(records, key=key, reverse=reverse)
