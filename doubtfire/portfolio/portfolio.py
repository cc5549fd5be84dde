# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""A student's portfolio: one PDF of their work in a unit.

The portfolio is a cover sheet, then the PDF of every task the student
chose to include (in order of target date), then any extra files they
uploaded just for the portfolio.  Extra files are kept in the
project's portfolio directory as ``NNN-kind-name.ext``.
"""

from __future__ import annotations

import html
import logging
from pathlib import Path
import re
import tempfile
from typing import Any

import pymupdf
import zipfly

from doubtfire.db.tables import Project, Task, TaskDefinition
from doubtfire.doubtfire_exceptions import (
    DoubtfireNoFilesException,
    DoubtfirePipelineError,
)
from doubtfire.files.convert import StagedFile, cover_html_page
from doubtfire.files.paths import sanitized_filename, sanitized_path
from doubtfire.misc_utils import local_now_to_simple_string, utc_now


log = logging.getLogger("portfolio")

portfolio_file_re = re.compile(r"^(\d+)-(document|code|image)-(.+)$")

placeholder_name = "FileNotFound.pdf"


def portfolio_path(fh, project, *, create: bool = True) -> Path:
    """Where a project's compiled portfolio lives, whether or not it exists yet."""
    d = fh.student_portfolio_dir(project, create=create)
    return d / f"{sanitized_filename(project.student.username)}-portfolio.pdf"


def portfolio_available(fh, project) -> bool:
    return portfolio_path(fh, project, create=False).is_file()


def list_portfolio_files(fh, project) -> list[dict[str, Any]]:
    """The extra files uploaded for a portfolio, in index order.

    Returns:
        list: of dicts with keys ``idx``, ``kind``, ``name`` and ``path``.
    """
    d = fh.student_portfolio_dir(project, create=False)
    if not d.is_dir():
        return []
    files = []
    for f in d.iterdir():
        m = portfolio_file_re.match(f.name)
        if not m or not f.is_file():
            continue
        files.append(
            {
                "idx": int(m.group(1)),
                "kind": m.group(2),
                "name": Path(m.group(3)).stem,
                "path": f,
            }
        )
    files.sort(key=lambda x: x["idx"])
    return files


def add_portfolio_file(
    fh, project, upload, name: str, kind: str, filename: str
) -> tuple[bool, str]:
    """Check and store an extra file for the portfolio.

    Args:
        fh (FileHelper): file storage.
        project (Project): whose portfolio.
        upload: the file contents, as bytes or a path.
        name: a short description chosen by the student, e.g.,
            "Learning summary".
        kind: "document", "code" or "image".
        filename: the name of the uploaded file, used for its extension.

    Returns:
        ``(True, "")`` when stored, else ``False`` with a reason.
    """
    if not fh.accept_file(upload, name, kind):
        return False, f"'{filename}' is not a valid {kind} file"
    data = upload if isinstance(upload, (bytes, bytearray)) else Path(upload).read_bytes()
    existing = list_portfolio_files(fh, project)
    idx = max((f["idx"] for f in existing), default=-1) + 1
    ext = Path(sanitized_filename(filename)).suffix.lower()
    safe = sanitized_path(name).name
    d = fh.student_portfolio_dir(project)
    f = d / f"{idx:03}-{kind}-{safe}{ext}"
    f.write_bytes(bytes(data))
    log.info("Added %s to portfolio of project %s", f.name, project.id)
    return True, ""


def remove_portfolio_file(fh, project, idx: int, kind: str, name: str) -> bool:
    """Delete one extra portfolio file; False if there was no such file."""
    for f in list_portfolio_files(fh, project):
        if f["idx"] == idx and f["kind"] == kind and f["name"] == sanitized_path(name).name:
            f["path"].unlink()
            log.info("Removed %s from portfolio of project %s", f["path"].name, project.id)
            return True
    return False


def remove_portfolio(fh, project) -> None:
    """Delete the compiled portfolio, leaving the uploaded files."""
    f = portfolio_path(fh, project, create=False)
    if f.exists():
        f.unlink()
        log.info("Removed portfolio of project %s", project.id)
    Project.update(portfolio_production_date=None).where(
        Project.id == project.id
    ).execute()
    project.portfolio_production_date = None


def included_tasks(db, project) -> list[Task]:
    """Tasks with a PDF that the student wants in their portfolio, by target date."""
    query = (
        Task.select()
        .join(TaskDefinition)
        .where(Task.project == project, Task.include_in_portfolio == True)  # noqa: E712
        .order_by(TaskDefinition.target_date, TaskDefinition.abbreviation)
    )
    return [t for t in query if db.has_pdf(t)]


def cover_html(project, tasks, *, when: str | None = None) -> str:
    """The body of the portfolio cover sheet."""
    e = html.escape
    student = project.student
    unit = project.unit
    when = when if when else local_now_to_simple_string()
    rows = "\n".join(
        f"<tr><td>{e(t.task_definition.abbreviation)}</td>"
        f"<td>{e(t.task_definition.name)}</td>"
        f"<td>{e(t.task_status.display_name)}</td></tr>"
        for t in tasks
    )
    return (
        f"<h1>{e(unit.code)} {e(unit.name)}</h1>\n"
        f"<h2>Portfolio of {e(student.name or student.username)}"
        f" ({e(student.username)})</h2>\n"
        f"<p>Produced {e(when)}</p>\n"
        "<table>\n<tr><th>Task</th><th>Name</th><th>Status</th></tr>\n"
        f"{rows}\n</table>\n"
    )


def compile_portfolio(db, fh, project) -> Path:
    """Build the portfolio PDF of a project.

    Returns:
        pathlib.Path: the compiled portfolio.

    Raises:
        DoubtfireNoFilesException: there is nothing to put in it.
        DoubtfirePipelineError: a part could not be converted or the
            parts could not be joined.  Any earlier portfolio is left
            as it was.
    """
    tasks = included_tasks(db, project)
    extras = list_portfolio_files(fh, project)
    if not tasks and not extras:
        raise DoubtfireNoFilesException(f"Nothing to put in portfolio of project {project.id}")

    with tempfile.TemporaryDirectory(prefix="doubtfire-portfolio-") as tmpdir:
        tmpdir = Path(tmpdir)
        cover = tmpdir / "cover.pdf"
        body = cover_html(project, tasks)
        if not fh.render_html_to_pdf(cover_html_page(body, title="Portfolio"), cover):
            raise DoubtfirePipelineError(f"Could not make cover of project {project.id}")
        parts = [cover]
        parts.extend(Path(t.portfolio_evidence) for t in tasks)
        for f in extras:
            out = tmpdir / f"extra-{f['idx']}.pdf"
            item = StagedFile(idx=f["idx"], kind=f["kind"], path=f["path"], ext=f["path"].suffix)
            if not fh.convert_to_pdf(item, out):
                raise DoubtfirePipelineError(
                    f"Could not convert portfolio file {f['path'].name} of project {project.id}"
                )
            parts.append(out)
        final = portfolio_path(fh, project)
        if not fh.aggregate(parts, final):
            raise DoubtfirePipelineError(f"Could not build portfolio of project {project.id}")

    project.portfolio_production_date = utc_now()
    Project.update(portfolio_production_date=project.portfolio_production_date).where(
        Project.id == project.id
    ).execute()
    log.info(
        "Portfolio of project %s: %d task(s), %d extra file(s)",
        project.id,
        len(tasks),
        len(extras),
    )
    return final


def _write_placeholder(f: Path) -> None:
    doc = pymupdf.open()
    w, h = pymupdf.paper_size("A4")
    pg = doc.new_page(width=w, height=h)
    margin = 72
    r = pg.insert_textbox(
        pymupdf.Rect(margin, margin, w - margin, h / 3),
        "File not found.\n\nThis document has not been created yet.",
        fontsize=18,
        color=(0, 0, 0),
        align="center",
    )
    if r < 0:
        doc.close()
        log.error("Placeholder text did not fit its box: short by %s", -r)
        raise DoubtfirePipelineError("Could not write the placeholder PDF")
    f.parent.mkdir(parents=True, exist_ok=True)
    doc.save(f)
    doc.close()


def placeholder_pdf(fh) -> Path:
    """A one-page "file not found" PDF, made the first time it is needed."""
    f = Path(fh.root) / "resources" / placeholder_name
    if not f.is_file():
        _write_placeholder(f)
    return f


def portfolio_or_placeholder(fh, project) -> tuple[Path, str]:
    """The portfolio if it exists, else the placeholder.

    Returns:
        tuple: the file to send and the name to offer for downloading it.
    """
    f = portfolio_path(fh, project, create=False)
    if f.is_file():
        return f, "portfolio.pdf"
    return placeholder_pdf(fh), placeholder_name


def unit_portfolio_zip_generator(fh, unit):
    """Stream a zip of every portfolio in the unit without building it in memory.

    Raises:
        DoubtfireNoFilesException: nobody in the unit has a portfolio.
    """
    paths = [
        {
            "fs": str(portfolio_path(fh, p, create=False)),
            "n": f"{sanitized_filename(p.student.username)}-portfolio.pdf",
        }
        for p in unit.projects.order_by(Project.id)
        if portfolio_available(fh, p)
    ]
    if not paths:
        raise DoubtfireNoFilesException(f"There are no portfolios in unit {unit.code}")
    zfly = zipfly.ZipFly(paths=paths)
    return zfly.generator()


def unit_portfolio_zip(fh, unit, user, dest_dir) -> Path:
    """Write a zip of every portfolio in the unit, for a staff member to download.

    Returns:
        pathlib.Path: the zip, named for the unit and the user.
    """
    name = sanitized_filename(f"portfolios-{unit.code}-{user.username}.zip")
    chunks = unit_portfolio_zip_generator(fh, unit)
    f = Path(dest_dir) / name
    with f.open("wb") as out:
        for chunk in chunks:
            out.write(chunk)
    log.info("Wrote %s", f)
    return f
