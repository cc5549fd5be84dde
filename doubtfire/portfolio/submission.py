# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Turning a student's uploaded files into the PDF for one task.

Uploads are checked and staged into ``new/<task id>`` as files named
``NNN.kind.ext``.  Later (often in a batch) :func:`process_task_submission`
moves them to ``in_process``, converts each to PDF, joins them into the
task's PDF and files the originals under ``done``.  If anything goes
wrong the staged files go back to ``new`` so the job can be retried.
"""

from __future__ import annotations

import logging
from pathlib import Path
import shutil
import tempfile
from typing import Any

from doubtfire.db.tables import Task
from doubtfire.doubtfire_exceptions import (
    DoubtfireNoFilesException,
    DoubtfirePipelineError,
    DoubtfireUploadRejected,
)
from doubtfire.files.paths import sanitized_filename
from doubtfire.misc_utils import format_int_list_with_runs, utc_now


log = logging.getLogger("portfolio")


def _read_upload(data) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if hasattr(data, "read"):
        return data.read()
    return Path(data).read_bytes()


def _staged_name(idx: int, kind: str, filename: str) -> str:
    ext = Path(sanitized_filename(filename)).suffix.lower()
    return f"{idx:03}.{kind}{ext}"


def stage_upload(fh, task, files: dict[str, Any]) -> tuple[bool, str]:
    """Check uploads against the task's requirements and stage them.

    Args:
        fh (FileHelper): file storage to use.
        task (Task): the task being submitted.
        files: keyed by the upload requirement's key, each value a
            pair ``(filename, data)`` where data is bytes, a path or a
            file-like object.  The original filename is only used for
            its extension.

    Returns:
        ``(True, "")`` when the files were staged, otherwise ``False``
        and a reason suitable for showing the student.  Nothing is
        staged unless every file is acceptable.
    """
    requirements = task.task_definition.get_upload_requirements()
    if not requirements:
        return False, "This task does not accept uploads"

    checked = []
    for idx, req in enumerate(requirements):
        if req["key"] not in files:
            return False, f"Missing file for \"{req['name']}\""
        filename, data = files[req["key"]]
        data = _read_upload(data)
        if not fh.accept_file(data, req["name"], req["type"]):
            return False, f"'{filename}' is not a valid {req['type']} file"
        checked.append((_staged_name(idx, req["type"], filename), data))

    to_dir = fh.student_work_dir("new", task)
    # a new upload replaces anything still waiting
    for old in to_dir.iterdir():
        if old.is_dir():
            shutil.rmtree(old)
        else:
            old.unlink()
    for name, data in checked:
        (to_dir / name).write_bytes(data)

    task.file_uploaded_at = utc_now()
    Task.update(file_uploaded_at=task.file_uploaded_at).where(
        Task.id == task.id
    ).execute()
    log.info("Staged %d file(s) for task %s", len(checked), task.id)
    return True, ""


def accept_upload(fh, task, files: dict[str, Any]) -> None:
    """Like :func:`stage_upload` but raises on rejection.

    Raises:
        DoubtfireUploadRejected: with the reason as the message.
    """
    ok, reason = stage_upload(fh, task, files)
    if not ok:
        raise DoubtfireUploadRejected(reason)


def task_pdf_path(fh, task, *, create: bool = True) -> Path:
    """Where the PDF for a task lives."""
    abbrev = sanitized_filename(task.task_definition.abbreviation)
    return fh.student_work_dir("pdf", task, create=create) / f"{abbrev}-{task.id}.pdf"


def pending_tasks(fh) -> list[Task]:
    """Tasks with staged uploads waiting to be processed, oldest task id first."""
    new_root = fh.student_work_dir("new")
    ids = sorted(int(d.name) for d in new_root.iterdir() if d.is_dir() and d.name.isdigit())
    return list(Task.select().where(Task.id.in_(ids)).order_by(Task.id)) if ids else []


def process_task_submission(db, fh, task) -> Path:
    """Convert a task's staged uploads into its PDF.

    Args:
        db (DoubtfireDB): to record the new evidence.
        fh (FileHelper): file storage and conversion.
        task (Task): a task with staged uploads in ``new``.

    Returns:
        pathlib.Path: the task's new PDF.

    Raises:
        DoubtfireNoFilesException: nothing is staged for this task.
        DoubtfirePipelineError: some file could not be converted, or
            the PDFs could not be joined.

    On any failure, including errors from storage or the database,
    the staged files are put back in ``new`` before the exception
    propagates.
    """
    new_dir = fh.student_work_dir("new", task, create=False)
    if not new_dir.is_dir() or not any(new_dir.iterdir()):
        raise DoubtfireNoFilesException(f"No files staged for task {task.id}")

    in_process = fh.student_work_dir("in_process", task, create=False)
    fh.move_files(new_dir, in_process)

    try:
        with tempfile.TemporaryDirectory() as tmpdir:
            result = fh.convert_files_to_pdf(in_process, tmpdir)
            if not result.ok:
                if result.failed:
                    which = format_int_list_with_runs(result.failed, use_unicode=False)
                    msg = f"Could not convert file(s) {which} of task {task.id}"
                else:
                    msg = f"Nothing to convert for task {task.id}"
                raise DoubtfirePipelineError(msg)
            final = task_pdf_path(fh, task)
            if not fh.aggregate(result.pdf_paths, final):
                raise DoubtfirePipelineError(f"Could not build the PDF of task {task.id}")
        db.set_portfolio_evidence(task, final)
    except Exception as e:
        log.error("Task %s: %s: returning files to new", task.id, e)
        fh.move_files(in_process, new_dir)
        raise

    fh.move_files(in_process, fh.student_work_dir("done", task))
    log.info("Task %s PDF is %s", task.id, final)
    return final


def process_pending(db, fh) -> tuple[list[int], list[int]]:
    """Process every task with staged uploads.

    Returns:
        Two lists of task ids: those that worked, and those that failed
        and were left in ``new`` for another attempt.
    """
    good = []
    bad = []
    for task in pending_tasks(fh):
        try:
            process_task_submission(db, fh, task)
            good.append(task.id)
        except (DoubtfirePipelineError, DoubtfireNoFilesException) as e:
            log.warning("Task %s not processed: %s", task.id, e)
            bad.append(task.id)
    return good, bad
