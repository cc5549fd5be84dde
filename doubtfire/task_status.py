# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""The states a task can be in, who may move it there, and how.

The state machine works only with the closed :class:`TaskStatus` enum.
Human-readable names and descriptions live in :data:`status_info` (and
are copied into the ``TaskStatusInfo`` table for display), so editing
display text can never change the rules.
"""

from __future__ import annotations

from enum import Enum


class TaskStatus(str, Enum):
    not_submitted = "not_submitted"
    need_help = "need_help"
    working_on_it = "working_on_it"
    ready_to_mark = "ready_to_mark"
    discuss = "discuss"
    redo = "redo"
    fix_and_resubmit = "fix_and_resubmit"
    fix_and_include = "fix_and_include"
    complete = "complete"

    def __str__(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return status_info[self]["name"]

    @property
    def description(self) -> str:
        return status_info[self]["description"]


class Role(str, Enum):
    student = "student"
    tutor = "tutor"
    convenor = "convenor"

    def __str__(self) -> str:
        return self.value


status_info = {
    TaskStatus.not_submitted: {
        "name": "Not Submitted",
        "description": "This task has not been submitted to be marked by your tutor.",
    },
    TaskStatus.need_help: {
        "name": "Need Help",
        "description": "Some help is required to complete this task.",
    },
    TaskStatus.working_on_it: {
        "name": "Working On It",
        "description": "This task is currently being worked on.",
    },
    TaskStatus.ready_to_mark: {
        "name": "Ready to Mark",
        "description": "This task is ready for the tutor to assess to provide feedback.",
    },
    TaskStatus.discuss: {
        "name": "Discuss",
        "description": "Your work looks good, discuss it with your tutor to complete.",
    },
    TaskStatus.redo: {
        "name": "Redo",
        "description": "Your submission is not sufficient, start the task again.",
    },
    TaskStatus.fix_and_resubmit: {
        "name": "Fix and Resubmit",
        "description": "Your submission is almost there, fix the issues and resubmit.",
    },
    TaskStatus.fix_and_include: {
        "name": "Fix and Include",
        "description": "Fix the issues and include the task in your portfolio, do not resubmit.",
    },
    TaskStatus.complete: {
        "name": "Complete",
        "description": "This task is signed off as complete.",
    },
}

terminal_statuses = frozenset([TaskStatus.complete])

ready_or_complete_statuses = frozenset(
    [TaskStatus.complete, TaskStatus.discuss, TaskStatus.ready_to_mark]
)

# outcomes that are recorded against the latest submission
assessed_statuses = frozenset(
    [
        TaskStatus.redo,
        TaskStatus.fix_and_resubmit,
        TaskStatus.fix_and_include,
        TaskStatus.complete,
    ]
)

tutor_roles = frozenset([Role.tutor, Role.convenor])

# trigger -> (action, target).  The action decides both the side effects
# and who is allowed: "engage" and "submit" for anyone enrolled, "assess"
# for tutors only.
triggers = {
    "ready_to_mark": ("submit", TaskStatus.ready_to_mark),
    "rtm": ("submit", TaskStatus.ready_to_mark),
    "not_submitted": ("engage", TaskStatus.not_submitted),
    "not_ready_to_mark": ("engage", TaskStatus.not_submitted),
    "need_help": ("engage", TaskStatus.need_help),
    "working_on_it": ("engage", TaskStatus.working_on_it),
    "redo": ("assess", TaskStatus.redo),
    "complete": ("assess", TaskStatus.complete),
    "fix_and_resubmit": ("assess", TaskStatus.fix_and_resubmit),
    "fix": ("assess", TaskStatus.fix_and_resubmit),
    "fix_and_include": ("assess", TaskStatus.fix_and_include),
    "fixinc": ("assess", TaskStatus.fix_and_include),
    "discuss": ("assess", TaskStatus.discuss),
    "d": ("assess", TaskStatus.discuss),
}

task_permissions = {
    Role.student: [
        "get",
        "put",
        "get_submission",
        "make_submission",
        "delete_own_comment",
    ],
    Role.tutor: [
        "get",
        "put",
        "get_submission",
        "make_submission",
        "delete_other_comment",
        "delete_own_comment",
    ],
    Role.convenor: [
        "get",
        "get_submission",
        "make_submission",
        "delete_other_comment",
        "delete_own_comment",
    ],
    None: [],
}


def lookup_trigger(trigger: str) -> tuple[str, TaskStatus] | None:
    """Find the action and target status for a trigger, or None if unknown."""
    if trigger is None:
        return None
    return triggers.get(trigger.strip().lower())


def role_may(role: Role | None, action: str) -> bool:
    """Can someone in this role perform a lifecycle action?

    Args:
        role: the resolved role of the actor, or None if they have no
            role in the project.
        action: one of "engage", "submit" or "assess".
    """
    if role is None:
        return False
    if action == "assess":
        return role in tutor_roles
    return action in ("engage", "submit")


def authorise(role: Role | None, permission: str) -> bool:
    """Is the role allowed the named permission on a task."""
    return permission in task_permissions.get(role, [])
