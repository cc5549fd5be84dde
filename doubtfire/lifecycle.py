# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Moving tasks between states in response to student and tutor actions.

There are three kinds of transition, each with its own side effects:

* *engage* (need help, working on it, not submitted) records an
  engagement and clears any completion date;
* *submit* (ready to mark) stamps the completion date and records a
  submission, merging resubmissions made within an hour;
* *assess* (tutor outcomes) records who assessed the latest submission,
  when, and with what outcome.

A complete task is finished: no transition moves it again.  After each
transition (unless batched) the project's statistics are recomputed.
"""

from __future__ import annotations

from contextlib import contextmanager
import logging
import threading
from typing import Callable, Iterable, Protocol

from doubtfire.db.tables import Task, TaskEngagement, TaskSubmission
from doubtfire.doubtfire_exceptions import (
    DoubtfireIllegalTransition,
    DoubtfireNoPermission,
)
from doubtfire.misc_utils import is_within_one_hour_of_now, utc_now
from doubtfire.task_status import (
    TaskStatus,
    Role,
    assessed_statuses,
    lookup_trigger,
    ready_or_complete_statuses,
    role_may,
    terminal_statuses,
)


log = logging.getLogger("task")

# transitions on the same task must not interleave, whichever
# TaskLifecycle in this process makes them
_task_locks = [threading.Lock() for _ in range(64)]


class ProjectCollaborator(Protocol):
    """What the lifecycle needs from whoever looks after projects."""

    def mark_started(self, project) -> None: ...

    def recompute_stats(self, task) -> object: ...


class TaskLifecycle:
    """The task state machine.

    Args:
        db (DoubtfireDB): where tasks and their history are stored.

    Keyword Args:
        projects: marks projects started and recomputes their stats;
            defaults to the database itself.
        clock: returns "now" as a naive UTC datetime.

    Transitions of one task are serialised by a lock table shared by
    all instances, so callers may make a new lifecycle per request.
    Other processes sharing the database are not covered.
    """

    def __init__(
        self,
        db,
        *,
        projects: ProjectCollaborator | None = None,
        clock: Callable = utc_now,
    ):
        self.db = db
        self.projects = projects if projects is not None else db
        self.clock = clock

    def _lock_for(self, task) -> threading.Lock:
        return _task_locks[task.id % len(_task_locks)]

    def trigger_transition(
        self,
        task,
        trigger: str,
        by_user,
        *,
        role: Role | None,
        bulk: bool = False,
        strict: bool = False,
    ) -> bool:
        """Act on a trigger from a student or tutor.

        Args:
            task (Task): the task to change.
            trigger: e.g., "ready_to_mark", "rtm", "fix", "complete".
            by_user (User): who is acting; recorded as the assessor
                for assessments.

        Keyword Args:
            role: the actor's already-resolved role in the project, or
                None if they have none.
            bulk: if True, don't recompute the project's stats; the
                caller will do that once after a batch of transitions.
            strict: raise instead of silently ignoring a trigger that
                cannot be applied.

        Returns:
            True if the task changed state, False if the trigger was
            ignored.

        Raises:
            DoubtfireIllegalTransition: only when ``strict``: unknown
                trigger or the task is complete.
            DoubtfireNoPermission: only when ``strict``: the role may
                not perform this transition.
            peewee.PeeweeException: the database failed; nothing was
                changed.
        """
        try:
            found = lookup_trigger(trigger)
            if found is None:
                log.info("Ignoring unknown trigger '%s' on task %s", trigger, task.id)
                if strict:
                    raise DoubtfireIllegalTransition(f"Unknown trigger '{trigger}'")
                return False
            action, target = found
            if not role_may(role, action):
                log.info(
                    "Ignoring '%s' on task %s: role %s may not %s",
                    trigger,
                    task.id,
                    role,
                    action,
                )
                if strict:
                    raise DoubtfireNoPermission(
                        f"Role {role} cannot {action} task {task.id}"
                    )
                return False

            with self._lock_for(task):
                self._refresh(task)
                if action == "engage":
                    changed = self.engage(task, target)
                elif action == "submit":
                    changed = self.submit(task)
                else:
                    changed = self.assess(task, target, by_user)
            if not changed and strict:
                raise DoubtfireIllegalTransition(
                    f"Task {task.id} is {task.task_status} and cannot be changed"
                )
            return changed
        finally:
            if not bulk:
                self.projects.recompute_stats(task)

    def bulk_transition(
        self, changes: Iterable, by_user, *, role_for: Callable | None = None
    ) -> list[bool]:
        """Apply many (task, trigger) pairs, recomputing stats once per project.

        Keyword Args:
            role_for: resolves ``(project, user)`` to a role; defaults
                to the database's enrolment lookup.

        Returns:
            For each change, whether the task changed state.
        """
        role_for = role_for if role_for is not None else self.db.role_for
        results = []
        last_task_of_project = {}
        for task, trigger in changes:
            role = role_for(task.project, by_user)
            results.append(
                self.trigger_transition(task, trigger, by_user, role=role, bulk=True)
            )
            last_task_of_project[task.project_id] = task
        for task in last_task_of_project.values():
            self.projects.recompute_stats(task)
        return results

    @staticmethod
    def _refresh(task) -> None:
        """Reload the task's columns: another caller may have changed it."""
        current = Task.get_by_id(task.id)
        task.__data__.update(current.__data__)
        task._dirty.clear()

    @contextmanager
    def _committing(self, task):
        """Save within a transaction; on failure put the task object back as it was."""
        before = dict(task.__data__)
        try:
            with self.db.atomic():
                yield
        except Exception:
            task.__data__.clear()
            task.__data__.update(before)
            raise

    def engage(self, task, engagement_status: TaskStatus) -> bool:
        """Record that the student is engaging with the task, without submitting it."""
        if task.task_status in terminal_statuses:
            return False
        now = self.clock()
        with self._committing(task):
            task.status = engagement_status.value
            task.awaiting_signoff = False
            task.completion_date = None
            task.save()
            self.projects.mark_started(task.project)
            TaskEngagement.create(
                task=task,
                engagement_time=now,
                engagement=engagement_status.display_name,
            )
        log.info("Task %s engaged: %s", task.id, engagement_status)
        return True

    def submit(self, task) -> bool:
        """Mark the task ready to mark and record the submission.

        Resubmitting within an hour of the latest submission updates
        its time rather than adding another record.
        """
        if task.task_status in terminal_statuses:
            return False
        now = self.clock()
        with self._committing(task):
            task.status = TaskStatus.ready_to_mark.value
            task.awaiting_signoff = True
            task.completion_date = now
            task.save()
            self.projects.mark_started(task.project)
            submission = self.db.latest_submission(task)
            if (
                submission is not None
                and submission.submission_time is not None
                and is_within_one_hour_of_now(submission.submission_time, now=now)
            ):
                submission.submission_time = now
                submission.save()
            else:
                TaskSubmission.create(task=task, submission_time=now)
        log.info("Task %s submitted", task.id)
        return True

    def assess(self, task, task_status: TaskStatus, assessor) -> bool:
        """Give the task an assessment outcome.

        For the "assessed" outcomes (redo, fix and resubmit, fix and
        include, complete) the latest submission is annotated with the
        assessor, time and outcome; one is created if there is none.
        """
        if task.task_status in terminal_statuses:
            return False
        now = self.clock()
        with self._committing(task):
            task.status = task_status.value
            task.awaiting_signoff = False
            if task_status in ready_or_complete_statuses:
                if task.completion_date is None:
                    task.completion_date = now
            else:
                task.completion_date = None
            task.save()
            self.projects.mark_started(task.project)
            if task_status in assessed_statuses:
                attrs = {
                    "assessment_time": now,
                    "assessor": assessor,
                    "outcome": task_status.display_name,
                }
                submission = self.db.latest_submission(task)
                if submission is None:
                    TaskSubmission.create(task=task, **attrs)
                else:
                    for k, v in attrs.items():
                        setattr(submission, k, v)
                    submission.save()
        log.info(
            "Task %s assessed as %s by %s",
            task.id,
            task_status,
            getattr(assessor, "username", None),
        )
        return True
