# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from datetime import date, datetime, timedelta

from doubtfire.task_status import TaskStatus
from doubtfire.due_dates import (
    days_overdue,
    weeks_overdue,
    days_until_due,
    weeks_until_due,
    days_since_completion,
    is_overdue,
    is_long_overdue,
    is_currently_due,
    is_assessed,
    is_ready_or_complete,
    ok_to_submit,
)

target = date(2024, 3, 1)


def test_days_and_weeks() -> None:
    assert days_overdue(target, date(2024, 3, 11)) == 10
    assert weeks_overdue(target, date(2024, 3, 11)) == 1
    assert days_until_due(target, date(2024, 2, 16)) == 14
    assert weeks_until_due(target, date(2024, 2, 16)) == 2
    assert days_overdue(target, target) == 0


def test_accepts_datetimes() -> None:
    assert days_overdue(datetime(2024, 3, 1, 23, 59), date(2024, 3, 3)) == 2
    assert days_since_completion(datetime(2024, 3, 1, 9, 0), date(2024, 3, 8)) == 7


def test_overdue_needs_a_week() -> None:
    s = TaskStatus.working_on_it
    assert not is_overdue(s, target, target + timedelta(days=6))
    assert is_overdue(s, target, target + timedelta(days=7))
    assert not is_overdue(s, target, target - timedelta(days=30))


def test_long_overdue_needs_two_weeks() -> None:
    s = TaskStatus.not_submitted
    assert not is_long_overdue(s, target, target + timedelta(days=13))
    assert is_long_overdue(s, target, target + timedelta(days=14))


def test_complete_never_overdue_or_due() -> None:
    s = TaskStatus.complete
    way_late = target + timedelta(days=100)
    assert not is_overdue(s, target, way_late)
    assert not is_long_overdue(s, target, way_late)
    assert not is_currently_due(s, target, target)


def test_currently_due_window() -> None:
    s = TaskStatus.need_help
    assert is_currently_due(s, target, target)
    assert is_currently_due(s, target, target - timedelta(days=7))
    assert is_currently_due(s, target, target + timedelta(days=7))
    assert not is_currently_due(s, target, target + timedelta(days=8))
    assert not is_currently_due(s, target, target - timedelta(days=8))


def test_status_groups() -> None:
    assert is_assessed(TaskStatus.redo)
    assert is_assessed(TaskStatus.complete)
    assert not is_assessed(TaskStatus.discuss)
    assert not is_assessed(TaskStatus.ready_to_mark)
    assert is_ready_or_complete(TaskStatus.discuss)
    assert not is_ready_or_complete(TaskStatus.fix_and_include)
    assert ok_to_submit(TaskStatus.redo)
    assert not ok_to_submit(TaskStatus.discuss)
