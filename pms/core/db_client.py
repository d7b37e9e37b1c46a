"""SQLite document-store client with CRUD operations.

Collections are plain tables; nested data (checklists, document lists, step
logs) lives in JSON text columns and is decoded transparently on read.
"""

import asyncio
import json
import logging
import re
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from pms.core.config import settings


logger = logging.getLogger(__name__)


# Columns stored as JSON text and decoded on read
JSON_COLUMNS = frozenset({"tasks", "completed_steps", "last_error", "documents", "breakdown"})

# Columns stored as INTEGER 0/1 and returned as bool
BOOLEAN_COLUMNS = frozenset({"on_payroll", "read"})


class DatabaseError(Exception):
    """Raised when a storage operation fails for reasons other than a missing record."""


class RecordNotFoundError(KeyError):
    """Raised when a record id does not exist in a collection."""


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding in filter expressions via json.dumps."""
    return json.dumps(str(value))[1:-1]


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _encode_value(value: Any) -> Any:
    """Convert a Python value into something SQLite can bind."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, dict | list | tuple):
        return json.dumps(value, default=str)
    return value


def _decode_record(record: dict[str, Any]) -> dict[str, Any]:
    """Stringify the id, decode JSON columns and restore booleans."""
    decoded = record.copy()
    for key, value in decoded.items():
        if key == "id" and isinstance(value, int):
            decoded[key] = str(value)
        elif key in JSON_COLUMNS and isinstance(value, str):
            decoded[key] = json.loads(value)
        elif key in BOOLEAN_COLUMNS and isinstance(value, int):
            decoded[key] = bool(value)
    return decoded


_COMPARISON = re.compile(r"""^(\w+)\s*(!=|=|~)\s*(['"])(.*)\3$""")


def parse_filter(filter_query: str) -> tuple[str, list[Any]]:
    """Parse `field = "value" && other != "value"` into a SQL WHERE clause and parameters.

    Supported operators are `=`, `!=` and `~` (substring match). Conditions are
    joined with `&&`.
    """
    if not filter_query:
        return "", []

    conditions = []
    params: list[Any] = []
    for raw_part in filter_query.split("&&"):
        match = _COMPARISON.match(raw_part.strip())
        if not match:
            msg = f"Invalid filter syntax: {raw_part.strip()}"
            raise ValueError(msg)

        field, op, _, value = match.groups()
        if op == "~":
            conditions.append(f"{field} LIKE ?")
            params.append(f"%{value}%")
        else:
            conditions.append(f"{field} {op} ?")
            params.append(value)

    return " AND ".join(conditions), params


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_running_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key in _db_connections:
        return _db_connections[cache_key]

    async with _db_lock:
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop_id = id(asyncio.get_running_loop())
    cache_key = (thread_id, loop_id, str(get_db_path(db_path)))

    async with _db_lock:
        conn = _db_connections.pop(cache_key, None)
        if conn is not None:
            await conn.close()
            logger.info("Closed SQLite connection", extra={"thread_id": thread_id, "loop_id": loop_id})


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    from pms.core import schema  # noqa: PLC0415 - schema imports this module

    await schema.init_db(db_path=db_path)


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its assigned id."""
    _validate_collection_name(collection)
    now = datetime.now().isoformat()
    payload = {"created": now, "updated": now, **data}

    try:
        conn = await get_connection()
        columns = ", ".join(payload)
        placeholders = ", ".join("?" for _ in payload)
        query = f"INSERT INTO {collection} ({columns}) VALUES ({placeholders})"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, [_encode_value(v) for v in payload.values()])
        await conn.commit()
        record_id = str(cursor.lastrowid)
    except aiosqlite.Error as e:
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to create record in {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Created record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=record_id)


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    _validate_collection_name(collection)
    if not str(record_id).isdigit():
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    try:
        conn = await get_connection()
        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (int(record_id),))
        row = await cursor.fetchone()
        columns = [description[0] for description in cursor.description]
    except aiosqlite.Error as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to get record from {collection}: {e}"
        raise DatabaseError(msg) from e

    if row is None:
        msg = f"Record not found in {collection}: {record_id}"
        raise RecordNotFoundError(msg)

    return _decode_record(dict(zip(columns, row, strict=True)))


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated record."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    # Raises RecordNotFoundError before attempting the write
    await get_record(collection=collection, record_id=record_id)

    payload = {**data, "updated": datetime.now().isoformat()}
    try:
        conn = await get_connection()
        set_clause = ", ".join(f"{key} = ?" for key in payload)
        values = [_encode_value(v) for v in payload.values()]
        values.append(int(record_id))
        query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
        await conn.execute(query, values)
        await conn.commit()
    except aiosqlite.Error as e:
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to update record in {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=record_id)


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    await get_record(collection=collection, record_id=record_id)

    try:
        conn = await get_connection()
        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        await conn.execute(query, (int(record_id),))
        await conn.commit()
    except aiosqlite.Error as e:
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        msg = f"Failed to delete record from {collection}: {e}"
        raise DatabaseError(msg) from e

    logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})


def _order_by(sort: str) -> str:
    """Translate `field` / `-field` into an ORDER BY clause, defaulting to id."""
    match = re.match(r"^(-?)([A-Za-z_][A-Za-z0-9_]*)$", sort.strip()) if sort else None
    if not match:
        if sort:
            logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
        return "id ASC"
    direction = "DESC" if match.group(1) else "ASC"
    return f"{match.group(2)} {direction}"


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = 50,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List records with optional filtering, sorting, and pagination."""
    _validate_collection_name(collection)
    where_clause, params = parse_filter(filter_query)
    where_sql = f"WHERE {where_clause}" if where_clause else ""
    offset = (page - 1) * per_page

    try:
        conn = await get_connection()
        query = f"SELECT * FROM {collection} {where_sql} ORDER BY {_order_by(sort)} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, [*params, per_page, offset])
        rows = await cursor.fetchall()
        columns = [description[0] for description in cursor.description]
    except aiosqlite.Error as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        msg = f"Failed to list records from {collection}: {e}"
        raise DatabaseError(msg) from e

    records = [_decode_record(dict(zip(columns, row, strict=True))) for row in rows]
    logger.info("Listed records", extra={"collection": collection, "count": len(records)})
    return records


async def get_first_record(*, collection: str, filter_query: str) -> dict[str, Any] | None:
    """Return the first record matching the filter, or None."""
    records = await list_records(collection=collection, filter_query=filter_query, per_page=1)
    return records[0] if records else None
