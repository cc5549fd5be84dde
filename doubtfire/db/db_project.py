# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from datetime import date
import json
import logging

from doubtfire.db.tables import Project, Task, TaskDefinition
from doubtfire.task_status import TaskStatus


log = logging.getLogger("DB")


# ------------------
# Project level bookkeeping


def mark_started(self, project):
    """Note that the student has begun work on the project."""
    if project.started:
        return
    project.started = True
    project.save()
    log.debug("Project %s started", project.id)


def reference_date(self, project):
    """The date to measure due dates against: simulated if set, else today."""
    if project.reference_date is not None:
        return project.reference_date
    return date.today()


def set_reference_date(self, project, when=None):
    """Pretend today is some other date for this project, or None to stop pretending."""
    project.reference_date = when
    project.save()


def recompute_stats(self, task):
    """Recalculate the share of the project's work in each status.

    Shares are weighted by the task definitions' weightings; if all
    weights are zero every task counts equally.

    Returns:
        dict: keyed by status, the fraction (0 to 1) of the project's
        work in that status.  Also stored on the project.
    """
    project = Project.get_by_id(task.project_id)
    rows = list(
        Task.select(Task.status, TaskDefinition.weighting)
        .join(TaskDefinition)
        .where(Task.project == project)
        .tuples()
    )
    total = sum(w for _, w in rows)
    use_weights = total > 0
    if not use_weights:
        total = len(rows)
    stats = {s.value: 0.0 for s in TaskStatus}
    for status, weight in rows:
        stats[status] += weight if use_weights else 1
    if total:
        stats = {k: round(v / total, 3) for k, v in stats.items()}
    project.task_stats = json.dumps(stats)
    project.save()
    return stats


def get_task_stats(self, project):
    return json.loads(Project.get_by_id(project.id).task_stats)
