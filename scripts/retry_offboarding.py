#!/usr/bin/env python3
"""Admin script to retry final offboarding runs that stopped on a failed step.

Usage:
    python scripts/retry_offboarding.py <employee_code>
    python scripts/retry_offboarding.py --list-failed
"""

import asyncio
import logging
import sys

from pms.core import db_client
from pms.core.db_client import sanitize_param
from pms.core.errors import LifecycleError
from pms.domain.offboarding import OffboardingRecord, OffboardingStatus
from pms.modules.offboarding import service as offboarding_service


logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


async def list_failed_runs() -> None:
    """List completed offboardings whose last final offboarding run failed."""
    records = await db_client.list_records(
        collection="offboarding",
        filter_query=f'status = "{OffboardingStatus.COMPLETED}"',
    )

    failed = [OffboardingRecord.from_record(r) for r in records]
    failed = [r for r in failed if r.last_error is not None]
    if not failed:
        logger.info("No failed final offboarding runs")
        return

    for record in failed:
        logger.info(f"{record.employee_id} - stopped at {record.last_error.step}: {record.last_error.message}")


async def retry(employee_code: str) -> None:
    """Re-run final offboarding for the employee with this code."""
    employee = await db_client.get_first_record(
        collection="employees",
        filter_query=f'employee_code = "{sanitize_param(employee_code)}"',
    )

    if not employee:
        logger.info(f"No employee with code {employee_code}")
        sys.exit(1)

    try:
        update = await offboarding_service.finalize_offboarding(employee_id=employee["id"])
    except LifecycleError as e:
        logger.info(f"Cannot retry: {e}")
        sys.exit(1)

    result = update.orchestration
    if result is None or not result.success:
        logger.info(f"Retry stopped at {result.failed_step if result else 'unknown step'}")
        sys.exit(1)

    logger.info(f"Final offboarding completed: {', '.join(result.completed_steps)}")


def print_usage() -> None:
    """Print usage information."""
    logger.info(__doc__)


async def main() -> None:
    """Main entry point."""
    args = sys.argv[1:]

    if not args or "--help" in args or "-h" in args:
        print_usage()
        return

    await db_client.init_db()
    try:
        if "--list-failed" in args:
            await list_failed_runs()
            return

        await retry(args[0])
    finally:
        await db_client.close_connection()


if __name__ == "__main__":
    asyncio.run(main())
