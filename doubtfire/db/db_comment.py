# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import logging

from doubtfire.db.tables import TaskComment
from doubtfire.doubtfire_exceptions import DoubtfireNoPermission
from doubtfire.misc_utils import utc_now
from doubtfire.task_status import authorise


log = logging.getLogger("DB")


# ------------------
# Discussion on a task


def add_comment(self, task, user, text):
    """Add a comment to a task's discussion.

    Args:
        task (Task): the task being discussed.
        user (User): who is commenting.
        text (str): the comment; surrounding whitespace is removed.

    Returns:
        TaskComment/None: the new comment, or None if nothing was added
        because there was no user, the text was empty, or it exactly
        repeats the last comment by the same user.
    """
    if user is None or text is None:
        return None
    text = text.strip()
    if not text:
        return None
    with self._db.atomic():
        last = (
            TaskComment.select()
            .where(TaskComment.task == task)
            .order_by(TaskComment.id.desc())
            .first()
        )
        if last and last.user_id == user.id and last.comment == text:
            log.debug("Dropping repeated comment by %s on task %s", user.username, task.id)
            return None
        comment = TaskComment.create(
            task=task, user=user, comment=text, created_at=utc_now()
        )
    return comment


def last_comment_by(self, task, user):
    """The text of a user's latest comment on a task, or empty string."""
    c = (
        TaskComment.select()
        .where(TaskComment.task == task, TaskComment.user == user)
        .order_by(TaskComment.id.desc())
        .first()
    )
    if c is None:
        return ""
    return c.comment


def get_comments(self, task):
    """Comments on a task in the order they were made."""
    return list(
        TaskComment.select().where(TaskComment.task == task).order_by(TaskComment.id)
    )


def delete_comment(self, comment, by_user, role):
    """Delete a comment, if the user's role allows it.

    Args:
        comment (TaskComment): what to delete.
        by_user (User): who is deleting.
        role (Role/None): their role in the task's project.

    Raises:
        DoubtfireNoPermission: deleting your own comment needs
            "delete_own_comment", deleting another's needs
            "delete_other_comment".
    """
    if by_user is not None and comment.user_id == by_user.id:
        needed = "delete_own_comment"
    else:
        needed = "delete_other_comment"
    if not authorise(role, needed):
        raise DoubtfireNoPermission(f"Not authorised to {needed.replace('_', ' ')}")
    comment.delete_instance()
    log.info("Comment %s deleted by %s", comment.id, getattr(by_user, "username", None))
