# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from io import BytesIO
import zipfile

import pymupdf
from PIL import Image
from pytest import raises

from doubtfire.doubtfire_exceptions import (
    DoubtfireNoFilesException,
    DoubtfirePipelineError,
)
from doubtfire.files.pdf_tools import pdf_page_count
from doubtfire.portfolio.portfolio import (
    add_portfolio_file,
    compile_portfolio,
    cover_html,
    included_tasks,
    list_portfolio_files,
    portfolio_available,
    portfolio_or_placeholder,
    portfolio_path,
    remove_portfolio,
    remove_portfolio_file,
    unit_portfolio_zip,
)


def make_pdf(f, pages=1):
    with pymupdf.open() as d:
        for n in range(pages):
            d.new_page().insert_text((72, 72), f"page {n + 1}")
        d.save(f)
    return f


def png_bytes():
    b = BytesIO()
    Image.new("RGB", (30, 30), (0, 0, 200)).save(b, "PNG")
    return b.getvalue()


def give_task_pdf(db, task, where, pages):
    f = make_pdf(where / f"task{task.id}.pdf", pages)
    db.set_portfolio_evidence(task, f)


def test_portfolio_path_deterministic(course, fh) -> None:
    p = portfolio_path(fh, course.project)
    assert p == portfolio_path(fh, course.project)
    assert p.name == "alex-portfolio.pdf"
    assert "COS10001" in str(p)
    assert not portfolio_available(fh, course.project)


def test_add_list_remove_files(course, fh) -> None:
    ok, _ = add_portfolio_file(fh, course.project, png_bytes(), "My diagram", "image", "d.PNG")
    assert ok
    ok, _ = add_portfolio_file(fh, course.project, b"x = 1\n", "Extra code", "code", "x.py")
    assert ok
    files = list_portfolio_files(fh, course.project)
    assert [(f["idx"], f["kind"], f["name"]) for f in files] == [
        (0, "image", "My_diagram"),
        (1, "code", "Extra_code"),
    ]
    assert files[0]["path"].name == "000-image-My_diagram.png"
    assert remove_portfolio_file(fh, course.project, 0, "image", "My diagram")
    assert not remove_portfolio_file(fh, course.project, 0, "image", "My diagram")
    assert len(list_portfolio_files(fh, course.project)) == 1


def test_add_rejected_file(course, fh) -> None:
    fh.reject.add("Evil")
    ok, reason = add_portfolio_file(fh, course.project, b"MZ", "Evil", "image", "e.exe")
    assert not ok
    assert reason == "'e.exe' is not a valid image file"
    assert list_portfolio_files(fh, course.project) == []


def test_next_index_after_removal(course, fh) -> None:
    add_portfolio_file(fh, course.project, png_bytes(), "a", "image", "a.png")
    add_portfolio_file(fh, course.project, png_bytes(), "b", "image", "b.png")
    remove_portfolio_file(fh, course.project, 0, "image", "a")
    add_portfolio_file(fh, course.project, png_bytes(), "c", "image", "c.png")
    assert [f["idx"] for f in list_portfolio_files(fh, course.project)] == [1, 2]


def test_included_tasks_order_and_choice(db, course, fh, tmp_path) -> None:
    give_task_pdf(db, course.task2, tmp_path, 1)
    give_task_pdf(db, course.task, tmp_path, 1)
    assert [t.id for t in included_tasks(db, course.project)] == [
        course.task.id,
        course.task2.id,
    ]
    course.task2.include_in_portfolio = False
    course.task2.save()
    assert [t.id for t in included_tasks(db, course.project)] == [course.task.id]


def test_cover_html_escaped(db, course) -> None:
    course.student.name = "<script>Bob</script>"
    course.student.save()
    body = cover_html(course.project, [course.task], when="today")
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "1.1P" in body


def test_compile_portfolio(db, course, fh, tmp_path) -> None:
    give_task_pdf(db, course.task, tmp_path, 2)
    give_task_pdf(db, course.task2, tmp_path, 3)
    add_portfolio_file(fh, course.project, png_bytes(), "Diagram", "image", "d.png")
    f = compile_portfolio(db, fh, course.project)
    assert f == portfolio_path(fh, course.project)
    # cover, 2 + 3 task pages, one image
    assert pdf_page_count(f) == 7
    assert course.project.portfolio_production_date is not None
    assert portfolio_available(fh, course.project)
    assert "Hello World" in fh.rendered[-1]


def test_compile_empty_portfolio(db, course, fh) -> None:
    with raises(DoubtfireNoFilesException):
        compile_portfolio(db, fh, course.project)
    assert not portfolio_available(fh, course.project)


def test_remove_portfolio(db, course, fh, tmp_path) -> None:
    give_task_pdf(db, course.task, tmp_path, 1)
    add_portfolio_file(fh, course.project, png_bytes(), "Diagram", "image", "d.png")
    compile_portfolio(db, fh, course.project)
    remove_portfolio(fh, course.project)
    assert not portfolio_available(fh, course.project)
    assert course.project.portfolio_production_date is None
    # uploads survive
    assert len(list_portfolio_files(fh, course.project)) == 1


def test_placeholder(course, fh) -> None:
    f, name = portfolio_or_placeholder(fh, course.project)
    assert name == "FileNotFound.pdf"
    assert pdf_page_count(f) == 1
    with pymupdf.open(f) as d:
        assert "File not found" in d[0].get_text()


def test_placeholder_text_overflow(course, fh, monkeypatch) -> None:
    monkeypatch.setattr(pymupdf.Page, "insert_textbox", lambda self, *a, **k: -12.5)
    with raises(DoubtfirePipelineError):
        portfolio_or_placeholder(fh, course.project)
    assert not (fh.root / "resources" / "FileNotFound.pdf").exists()


def test_portfolio_rather_than_placeholder(db, course, fh, tmp_path) -> None:
    give_task_pdf(db, course.task, tmp_path, 1)
    compile_portfolio(db, fh, course.project)
    f, name = portfolio_or_placeholder(fh, course.project)
    assert name == "portfolio.pdf"
    assert f == portfolio_path(fh, course.project)


def test_unit_zip(db, course, fh, tmp_path) -> None:
    other = db.enrol_student(db.create_user("bo"), course.unit)
    give_task_pdf(db, course.task, tmp_path, 1)
    compile_portfolio(db, fh, course.project)
    zipped = unit_portfolio_zip(fh, course.unit, course.convenor, tmp_path)
    assert zipped.name == "portfolios-COS10001-kim.zip"
    with zipfile.ZipFile(zipped) as z:
        # bo has no portfolio yet
        assert z.namelist() == ["alex-portfolio.pdf"]
    assert not portfolio_available(fh, other)


def test_unit_zip_nothing(course, fh, tmp_path) -> None:
    with raises(DoubtfireNoFilesException):
        unit_portfolio_zip(fh, course.unit, course.convenor, tmp_path)
    assert not (tmp_path / "portfolios-COS10001-kim.zip").exists()
