# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from pathlib import Path
from types import SimpleNamespace

from pytest import raises

from doubtfire.files.paths import (
    move_files,
    sanitized_filename,
    sanitized_path,
    student_portfolio_dir,
    student_work_dir,
)


def fake_task(task_id=42):
    unit = SimpleNamespace(code="COS10001", id=7)
    student = SimpleNamespace(username="jsmith")
    project = SimpleNamespace(unit=unit, student=student)
    return SimpleNamespace(id=task_id, project=project)


def test_sanitized_path() -> None:
    assert sanitized_path("a", "b c") == Path("a/b_c")
    assert sanitized_path("..", "etc") == Path("__/etc")
    assert sanitized_path(" COS-1 ") == Path("COS-1")
    assert sanitized_path("x.y") == Path("x_y")


def test_sanitized_filename() -> None:
    assert sanitized_filename("report.pdf") == "report.pdf"
    assert sanitized_filename("/tmp/../evil.sh") == "evil.sh"
    assert sanitized_filename(r"C:\Users\me\my file.docx") == "my_file.docx"
    assert sanitized_filename(" a&b.txt ") == "a_b.txt"


def test_work_dirs_with_task(tmp_path) -> None:
    t = fake_task()
    assert student_work_dir(tmp_path, "new", t) == tmp_path / "new" / "42"
    assert student_work_dir(tmp_path, "in_process", t) == tmp_path / "in_process/42"
    d = student_work_dir(tmp_path, "done", t)
    assert d == tmp_path / "COS10001-7" / "jsmith" / "done" / "42"
    assert d.is_dir()
    d = student_work_dir(tmp_path, "pdf", t)
    assert d == tmp_path / "COS10001-7" / "jsmith" / "pdf"
    d = student_work_dir(tmp_path, "plagiarism", t)
    assert d == tmp_path / "COS10001-7" / "jsmith" / "plagiarism" / "42"


def test_work_dirs_without_task(tmp_path) -> None:
    assert student_work_dir(tmp_path, "new") == tmp_path / "new"
    assert student_work_dir(tmp_path) == tmp_path
    with raises(ValueError, match="needs a task"):
        student_work_dir(tmp_path, "done")
    with raises(ValueError, match="Unknown"):
        student_work_dir(tmp_path, "marked", fake_task())


def test_work_dir_no_create(tmp_path) -> None:
    d = student_work_dir(tmp_path, "new", fake_task(), create=False)
    assert not d.exists()


def test_portfolio_dir(tmp_path) -> None:
    p = fake_task().project
    d = student_portfolio_dir(tmp_path, p)
    assert d == tmp_path / "portfolio" / "COS10001-7" / "jsmith"
    assert d.is_dir()


def test_move_files(tmp_path) -> None:
    src = tmp_path / "new" / "1"
    src.mkdir(parents=True)
    (src / "000.code.c").write_text("int main;")
    (src / "001.image.png").write_bytes(b"\x89PNG")
    dest = tmp_path / "in_process" / "1"
    move_files(src, dest)
    assert not src.exists()
    assert sorted(f.name for f in dest.iterdir()) == ["000.code.c", "001.image.png"]


def test_move_files_overwrites(tmp_path) -> None:
    src = tmp_path / "a"
    dest = tmp_path / "b"
    src.mkdir()
    dest.mkdir()
    (src / "f.txt").write_text("new")
    (dest / "f.txt").write_text("old")
    move_files(src, dest)
    assert (dest / "f.txt").read_text() == "new"
