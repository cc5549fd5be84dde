# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Where student work lives on disk, and moving it between stages.

Submitted files pass through directories named for their stage:
``new`` then ``in_process`` then ``done``.  Each task has its own
directory within a stage and only one writer is expected per task
directory at a time.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
import shutil


log = logging.getLogger("files")

work_kinds = ("new", "in_process", "done", "pdf", "plagiarism")


def sanitized_path(*paths: str) -> Path:
    """Make a relative path from parts, each stripped of anything unsafe.

    Every character other than letters, digits, underscore and hyphen
    becomes an underscore, so things like ``../`` and spaces are gone.
    """
    return Path(*[re.sub(r"[^\w\-]", "_", str(p).strip()) for p in paths])


def sanitized_filename(filename: str) -> str:
    """Sanitize a filename; any path details are discarded."""
    name = filename.strip()
    # Path.name doesn't understand windows paths on unix
    name = re.sub(r"\A.*(\\|/)", "", name)
    return re.sub(r"[^\w.\-]", "_", name)


def _unit_dir(project) -> str:
    return f"{project.unit.code}-{project.unit.id}"


def student_work_dir(root, kind=None, task=None, *, create=True) -> Path:
    """The directory for one stage of a task's work.

    Args:
        root (str/pathlib.Path): the top of the student work area.
        kind (str/None): one of "new", "in_process", "done", "pdf" or
            "plagiarism", or None for the root itself.
        task: the task, or None for the top of "new" or "in_process".

    Keyword Args:
        create: make the directory if it does not exist.

    Returns:
        pathlib.Path: the directory.

    Raises:
        ValueError: unknown kind, or a per-student kind without a task.
    """
    dst = Path(root)
    if kind is not None and kind not in work_kinds:
        raise ValueError(f'Unknown kind of student work directory "{kind}"')
    if kind is not None and task is not None:
        if kind == "pdf":
            dst = dst / sanitized_path(
                _unit_dir(task.project), task.project.student.username, kind
            )
        elif kind in ("done", "plagiarism"):
            dst = dst / sanitized_path(
                _unit_dir(task.project),
                task.project.student.username,
                kind,
                str(task.id),
            )
        else:
            dst = dst / kind / str(task.id)
    elif kind is not None:
        if kind not in ("new", "in_process"):
            raise ValueError(f'Student work directory "{kind}" needs a task')
        dst = dst / kind
    if create:
        dst.mkdir(parents=True, exist_ok=True)
    return dst


def student_portfolio_dir(root, project, *, create=True) -> Path:
    """The directory holding a project's portfolio files and compiled PDF."""
    dst = Path(root) / "portfolio"
    dst = dst / sanitized_path(_unit_dir(project), project.student.username)
    if create:
        dst.mkdir(parents=True, exist_ok=True)
    return dst


def move_files(from_path, to_path) -> None:
    """Move everything in one directory into another, then remove the first."""
    from_path = Path(from_path)
    to_path = Path(to_path)
    to_path.mkdir(parents=True, exist_ok=True)
    for f in from_path.iterdir():
        target = to_path / f.name
        if target.is_dir():
            shutil.rmtree(target)
        shutil.move(str(f), str(target))
    try:
        from_path.rmdir()
    except OSError as e:
        log.warning("failed to rm %s: %s", from_path, e)
