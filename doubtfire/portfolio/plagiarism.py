# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Recording matches found by an external similarity checker.

Each match is stored twice, once from each task's point of view, as the
checker reports a separate percentage and report for each side.
"""

import logging

from doubtfire.db.tables import PlagiarismMatchLink


log = logging.getLogger("portfolio")

default_warn_pct = 50


def record_plagiarism_match(db, fh, task, other_task, pct: int, html: str):
    """Store one side of a match: the link, its report and the task's score."""
    link = db.create_plagiarism_link(task, other_task, pct)
    fh.save_plagiarism_html(task, other_task, html)
    log.info("Task %s is %s%% similar to task %s", task.id, pct, other_task.id)
    return link


def record_plagiarism_pair(db, fh, t1, t2, match, *, warn_pct=None):
    """Store both sides of a match, unless neither side is similar enough to matter.

    Args:
        db (DoubtfireDB): where links are stored.
        fh (FileHelper): where the reports are stored.
        t1 (Task): one task.
        t2 (Task): the other task.
        match: a pair of ``(pct, html)`` pairs, first for ``t1``
            then for ``t2``.

    Keyword Args:
        warn_pct (int/None): ignore matches where both percentages are
            below this; default 50.

    Returns:
        bool: True if the match was recorded.
    """
    warn_pct = default_warn_pct if warn_pct is None else warn_pct
    (pct1, html1), (pct2, html2) = match
    if pct1 < warn_pct and pct2 < warn_pct:
        log.debug("Ignoring match of tasks %s and %s: below %s%%", t1.id, t2.id, warn_pct)
        return False
    with db.atomic():
        record_plagiarism_match(db, fh, t1, t2, pct1, html1)
        record_plagiarism_match(db, fh, t2, t1, pct2, html2)
    return True


def delete_plagiarism_match(db, fh, link) -> None:
    """Remove one side of a match along with its report."""
    fh.delete_plagiarism_html(link.task, link.other_task)
    db.remove_plagiarism_link(link)


def dismiss_plagiarism_match(db, link) -> int:
    """Mark a match as not of concern; returns the task's new score."""
    PlagiarismMatchLink.update(dismissed=True).where(
        PlagiarismMatchLink.id == link.id
    ).execute()
    link.dismissed = True
    return db.update_max_pct_similar(link.task)


def clear_plagiarism_matches(db, fh, task_definition) -> int:
    """Forget every match for a task definition before a fresh check.

    Returns:
        int: how many links were removed.
    """
    links = [
        link
        for t in task_definition.tasks
        for link in PlagiarismMatchLink.select().where(PlagiarismMatchLink.task == t)
    ]
    for link in links:
        delete_plagiarism_match(db, fh, link)
    log.info(
        "Cleared %d plagiarism link(s) for task %s", len(links), task_definition.abbreviation
    )
    return len(links)
