"""SQLite schema management (code-first approach)."""

import logging

from pms.core import db_client


logger = logging.getLogger(__name__)


# Central list of all collections in the schema, in dependency order
COLLECTIONS = [
    "employees",
    "onboarding",
    "offboarding",
    "documents",
    "notifications",
]


_TABLES: dict[str, str] = {
    "employees": """
        CREATE TABLE IF NOT EXISTS employees (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            employee_code TEXT NOT NULL UNIQUE,
            first_name TEXT NOT NULL,
            last_name TEXT NOT NULL,
            email TEXT NOT NULL,
            department TEXT NOT NULL DEFAULT '',
            position TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL CHECK (status IN ('onboarding', 'active', 'offboarding', 'archived')),
            on_payroll INTEGER NOT NULL DEFAULT 1,
            date_joined TEXT,
            basic_salary REAL,
            monthly_allowances REAL NOT NULL DEFAULT 0,
            monthly_deductions REAL NOT NULL DEFAULT 0,
            unused_leave_days REAL NOT NULL DEFAULT 0,
            archived_at TEXT,
            removed_from_payroll_at TEXT
        )
    """,
    "onboarding": """
        CREATE TABLE IF NOT EXISTS onboarding (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            employee_id TEXT NOT NULL UNIQUE,
            stage TEXT NOT NULL,
            progress INTEGER NOT NULL DEFAULT 0,
            task_progress INTEGER NOT NULL DEFAULT 0,
            tasks TEXT NOT NULL DEFAULT '[]',
            started_at TEXT NOT NULL,
            completed_at TEXT
        )
    """,
    "offboarding": """
        CREATE TABLE IF NOT EXISTS offboarding (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            employee_id TEXT NOT NULL UNIQUE,
            status TEXT NOT NULL CHECK (status IN ('pending_exit', 'in_progress', 'completed')),
            progress INTEGER NOT NULL DEFAULT 0,
            tasks TEXT NOT NULL DEFAULT '[]',
            type TEXT NOT NULL,
            reason TEXT NOT NULL,
            notes TEXT NOT NULL DEFAULT '',
            initiated_at TEXT NOT NULL,
            initiated_by TEXT,
            target_exit_date TEXT NOT NULL,
            actual_exit_date TEXT,
            completed_steps TEXT NOT NULL DEFAULT '[]',
            last_error TEXT,
            documents TEXT NOT NULL DEFAULT '[]'
        )
    """,
    "documents": """
        CREATE TABLE IF NOT EXISTS documents (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            employee_id TEXT NOT NULL,
            type TEXT NOT NULL,
            url TEXT NOT NULL,
            breakdown TEXT,
            generated_at TEXT NOT NULL
        )
    """,
    "notifications": """
        CREATE TABLE IF NOT EXISTS notifications (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            level TEXT NOT NULL,
            message TEXT NOT NULL,
            employee_id TEXT,
            link TEXT,
            read INTEGER NOT NULL DEFAULT 0
        )
    """,
}

_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_employees_status ON employees (status)",
    "CREATE INDEX IF NOT EXISTS idx_offboarding_status ON offboarding (status)",
    "CREATE INDEX IF NOT EXISTS idx_onboarding_stage ON onboarding (stage)",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_employee_type ON documents (employee_id, type)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)
    for collection in COLLECTIONS:
        await conn.execute(_TABLES[collection])
    for index in _INDEXES:
        await conn.execute(index)
    await conn.commit()

    logger.info("Schema initialized", extra={"collections": COLLECTIONS})
