# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Pure date arithmetic about when tasks are due.

Nothing here touches the database: callers pass in the task's status,
its target date and the project's reference date (which may be a
simulated "today" for testing or backdating).
"""

from __future__ import annotations

from datetime import date, datetime

from doubtfire.task_status import TaskStatus, assessed_statuses
from doubtfire.task_status import ready_or_complete_statuses


def _as_date(d: date | datetime) -> date:
    if isinstance(d, datetime):
        return d.date()
    return d


def days_overdue(target_date: date, reference_date: date) -> int:
    return (_as_date(reference_date) - _as_date(target_date)).days


def weeks_overdue(target_date: date, reference_date: date) -> int:
    return days_overdue(target_date, reference_date) // 7


def days_until_due(target_date: date, reference_date: date) -> int:
    return (_as_date(target_date) - _as_date(reference_date)).days


def weeks_until_due(target_date: date, reference_date: date) -> int:
    return days_until_due(target_date, reference_date) // 7


def days_since_completion(completion_date: datetime, reference_date: date) -> int:
    return (_as_date(reference_date) - _as_date(completion_date)).days


def is_overdue(status: TaskStatus, target_date: date, reference_date: date) -> bool:
    """A week or more past the target date, and not complete."""
    if status == TaskStatus.complete:
        return False
    return (
        _as_date(reference_date) > _as_date(target_date)
        and weeks_overdue(target_date, reference_date) >= 1
    )


def is_long_overdue(
    status: TaskStatus, target_date: date, reference_date: date
) -> bool:
    """Two weeks or more past the target date, and not complete."""
    if status == TaskStatus.complete:
        return False
    return (
        _as_date(reference_date) > _as_date(target_date)
        and weeks_overdue(target_date, reference_date) >= 2
    )


def is_currently_due(
    status: TaskStatus, target_date: date, reference_date: date
) -> bool:
    """Within a week either side of the target date, and not complete."""
    if status == TaskStatus.complete:
        return False
    return -7 <= days_overdue(target_date, reference_date) <= 7


def is_assessed(status: TaskStatus) -> bool:
    return status in assessed_statuses


def is_ready_or_complete(status: TaskStatus) -> bool:
    return status in ready_or_complete_statuses


def ok_to_submit(status: TaskStatus) -> bool:
    return status not in (TaskStatus.complete, TaskStatus.discuss)
