# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from collections import Counter
import logging
from pathlib import Path

from doubtfire.db.tables import (
    Project,
    Task,
    TaskComment,
    TaskDefinition,
    TaskEngagement,
    TaskSubmission,
    UnitRole,
    PlagiarismMatchLink,
)
from doubtfire.due_dates import days_overdue, is_currently_due
from doubtfire.due_dates import is_long_overdue, is_overdue
from doubtfire.task_status import TaskStatus, tutor_roles


log = logging.getLogger("DB")


# ------------------
# Tasks and their history


def get_task(self, project, task_definition):
    return Task.get_or_none(project=project, task_definition=task_definition)


def latest_submission(self, task):
    """The most recent submission for a task, or None."""
    return (
        TaskSubmission.select()
        .where(TaskSubmission.task == task)
        .order_by(TaskSubmission.submission_time.desc(), TaskSubmission.id.desc())
        .first()
    )


def get_submissions(self, task):
    """Submissions for a task, oldest first."""
    return list(
        TaskSubmission.select()
        .where(TaskSubmission.task == task)
        .order_by(TaskSubmission.id)
    )


def get_engagements(self, task):
    """Engagements for a task, oldest first."""
    return list(
        TaskEngagement.select()
        .where(TaskEngagement.task == task)
        .order_by(TaskEngagement.id)
    )


def delete_task(self, task):
    """Delete a task along with all its history."""
    with self._db.atomic():
        TaskSubmission.delete().where(TaskSubmission.task == task).execute()
        TaskEngagement.delete().where(TaskEngagement.task == task).execute()
        TaskComment.delete().where(TaskComment.task == task).execute()
        PlagiarismMatchLink.delete().where(
            (PlagiarismMatchLink.task == task) | (PlagiarismMatchLink.other_task == task)
        ).execute()
        task.delete_instance()
    log.info("Deleted task %s", task.id)


def set_portfolio_evidence(self, task, path):
    """Record where the task's PDF is, or None if it has none."""
    task.portfolio_evidence = str(path) if path is not None else None
    Task.update(portfolio_evidence=task.portfolio_evidence).where(
        Task.id == task.id
    ).execute()


def has_pdf(self, task):
    return task.portfolio_evidence is not None and Path(task.portfolio_evidence).exists()


def processing_pdf(self, task):
    """Submitted, but the PDF has not been made yet."""
    return task.portfolio_evidence is None and task.task_status == TaskStatus.ready_to_mark


def task_days_overdue(self, task):
    return days_overdue(task.task_definition.target_date, self.reference_date(task.project))


def task_is_overdue(self, task):
    return is_overdue(
        task.task_status,
        task.task_definition.target_date,
        self.reference_date(task.project),
    )


def task_is_long_overdue(self, task):
    return is_long_overdue(
        task.task_status,
        task.task_definition.target_date,
        self.reference_date(task.project),
    )


def task_is_currently_due(self, task):
    return is_currently_due(
        task.task_status,
        task.task_definition.target_date,
        self.reference_date(task.project),
    )


def tasks_ready_to_mark(self, user):
    """Tasks waiting for assessment in units where the user is staff.

    Oldest submissions first.
    """
    query = (
        Task.select()
        .join(Project)
        .join(UnitRole, on=(UnitRole.unit == Project.unit))
        .switch(Task)
        .join(TaskDefinition)
        .where(
            UnitRole.user == user,
            UnitRole.role.in_([r.value for r in tutor_roles]),
            Task.status == TaskStatus.ready_to_mark.value,
        )
        .order_by(Task.completion_date, Task.id)
    )
    return list(query)


def status_distribution(self, unit):
    """How many tasks of a unit are in each status."""
    query = Task.select(Task.status).join(Project).where(Project.unit == unit)
    counts = Counter(t.status for t in query)
    return {s: counts.get(s.value, 0) for s in TaskStatus}
