"""Sorting and per-status statistics shared by the onboarding and offboarding listings."""

from collections import Counter
from collections.abc import Iterable
from datetime import date

from pms.core.errors import InvalidInputError
from pms.models.service_models import LifecycleStats, LifecycleSummary, StatusCount


# Sort keys accepted by the listing endpoints; prefix with "-" for descending
SORT_FIELDS = {
    "name": lambda s: s.employee_name.lower(),
    "date": lambda s: s.started_at,
    "progress": lambda s: s.progress,
    "exit_date": lambda s: s.target_exit_date or date.max,
}


def sort_summaries(summaries: list[LifecycleSummary], sort: str | None) -> list[LifecycleSummary]:
    """Sort listing rows by `name`, `date`, `progress` or `exit_date` (`-` prefix for descending).

    Raises:
        InvalidInputError: If the sort key is not supported
    """
    if not sort:
        return summaries

    descending = sort.startswith("-")
    field = sort.lstrip("-")
    if field not in SORT_FIELDS:
        msg = f"Unsupported sort field: {field}. Use one of: {', '.join(SORT_FIELDS)}"
        raise InvalidInputError(msg)

    return sorted(summaries, key=SORT_FIELDS[field], reverse=descending)


def build_stats(summaries: Iterable[LifecycleSummary], statuses: Iterable[str]) -> LifecycleStats:
    """Count rows per status (every known status is listed, zero counts included)."""
    rows = list(summaries)
    counts = Counter(row.status for row in rows)
    average = round(sum(row.progress for row in rows) / len(rows), 1) if rows else 0.0
    return LifecycleStats(
        total=len(rows),
        by_status=[StatusCount(status=status, count=counts.get(status, 0)) for status in statuses],
        average_progress=average,
    )
