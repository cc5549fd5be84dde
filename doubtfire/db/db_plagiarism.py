# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import logging

from doubtfire.db.tables import PlagiarismMatchLink, Task


log = logging.getLogger("DB")


# ------------------
# Similarity between tasks, as reported by an external checker


def create_plagiarism_link(self, task, other_task, pct):
    """Record (or update) that a task is ``pct`` percent similar to another."""
    with self._db.atomic():
        link = PlagiarismMatchLink.get_or_none(task=task, other_task=other_task)
        if link is None:
            link = PlagiarismMatchLink.create(task=task, other_task=other_task, pct=pct)
        else:
            link.pct = pct
            link.save()
        self.update_max_pct_similar(task)
    return link


def get_plagiarism_link(self, task, other_task):
    return PlagiarismMatchLink.get_or_none(task=task, other_task=other_task)


def remove_plagiarism_link(self, link):
    task = link.task
    with self._db.atomic():
        link.delete_instance()
        self.update_max_pct_similar(task)


def update_max_pct_similar(self, task):
    """Set the task's similarity score to its worst undismissed match."""
    pcts = [
        link.pct
        for link in PlagiarismMatchLink.select().where(
            PlagiarismMatchLink.task == task,
            PlagiarismMatchLink.dismissed == False,  # noqa: E712
        )
    ]
    task.max_pct_similar = max(pcts) if pcts else 0
    # only this column: other fields of our copy may be stale
    Task.update(max_pct_similar=task.max_pct_similar).where(
        Task.id == task.id
    ).execute()
    log.debug("Task %s max_pct_similar is %s", task.id, task.max_pct_similar)
    return task.max_pct_similar
