# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import pymupdf
import pytest
from PIL import Image

from doubtfire.config import default_config
from doubtfire.files.convert import (
    StagedFile,
    code_to_html,
    convert_files_to_pdf,
    convert_to_pdf,
    cover_html_page,
    img_to_pdf,
    lexer_for_extension,
    staged_files,
)


def _weasyprint_works():
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


needs_weasyprint = pytest.mark.skipif(
    not _weasyprint_works(), reason="requires a working WeasyPrint"
)


def page_size_in_pixels(pdf, dpi=96):
    with pymupdf.open(pdf) as doc:
        assert len(doc) == 1
        r = doc[0].rect
    return round(r.width * dpi / 72), round(r.height * dpi / 72)


def test_staged_files_filters_and_orders(tmp_path) -> None:
    for name in (
        "002.image.png",
        "000.cover.html",
        "001.code.java",
        "README",
        "03.code.c",
        "004.video.mp4",
    ):
        (tmp_path / name).write_text("x")
    files = staged_files(tmp_path)
    assert [f.idx for f in files] == [0, 1, 2]
    assert [f.kind for f in files] == ["cover", "code", "image"]
    assert files[1].ext == ".java"


def test_lexer_choice() -> None:
    assert lexer_for_extension(".cpp").name == "C++"
    assert lexer_for_extension(".cs").name == "C++"
    assert lexer_for_extension(".H").name == "C"
    assert lexer_for_extension(".java").name == "Java"
    assert lexer_for_extension(".pas").name == "Delphi"
    assert lexer_for_extension(".rb").name == "C"
    assert lexer_for_extension("").name == "C"


def test_code_html_has_line_numbers() -> None:
    html = code_to_html("int x;\nint y;\nint z;\n", ".c")
    assert "linenos" in html
    assert "size: A4" in html
    assert "counter(pages)" in html
    assert "<!DOCTYPE html>" in html


def test_cover_html_page() -> None:
    html = cover_html_page("<h1>Portfolio</h1>")
    assert "<h1>Portfolio</h1>" in html
    assert "margin: 30mm" in html


def test_big_image_scaled_down(tmp_path) -> None:
    src = tmp_path / "big.png"
    Image.new("RGB", (3000, 1500), (0, 128, 0)).save(src)
    out = tmp_path / "big.pdf"
    assert img_to_pdf(src, out)
    assert page_size_in_pixels(out) == (1000, 500)


def test_tall_image_scaled_by_height(tmp_path) -> None:
    src = tmp_path / "tall.jpg"
    Image.new("RGB", (400, 2000)).save(src)
    out = tmp_path / "tall.pdf"
    assert img_to_pdf(src, out)
    assert page_size_in_pixels(out) == (200, 1000)


def test_small_image_not_scaled(tmp_path) -> None:
    src = tmp_path / "small.png"
    Image.new("RGBA", (300, 200), (0, 0, 255, 100)).save(src)
    out = tmp_path / "small.pdf"
    assert img_to_pdf(src, out)
    assert page_size_in_pixels(out) == (300, 200)


def test_bad_image_fails_cleanly(tmp_path) -> None:
    src = tmp_path / "broken.png"
    src.write_text("not an image")
    assert not img_to_pdf(src, tmp_path / "broken.pdf")


def test_convert_unknown_kind(tmp_path) -> None:
    f = tmp_path / "000.video.mp4"
    f.write_text("x")
    item = StagedFile(idx=0, kind="video", path=f, ext=".mp4")
    assert not convert_to_pdf(item, tmp_path / "out.pdf")


def test_convert_document_invalid(tmp_path) -> None:
    f = tmp_path / "000.document.pdf"
    f.write_text("x")
    item = StagedFile(idx=0, kind="document", path=f, ext=".pdf")
    cfg = dict(default_config, pdftk="false")
    assert not convert_to_pdf(item, tmp_path / "out.pdf", config=cfg)
    assert not (tmp_path / "out.pdf").exists()


def test_convert_files_reports_failures(tmp_path) -> None:
    src = tmp_path / "in_process"
    src.mkdir()
    Image.new("RGB", (10, 10)).save(src / "000.image.png")
    (src / "001.image.png").write_text("corrupt")
    Image.new("RGB", (10, 10)).save(src / "002.image.gif")
    dest = tmp_path / "pdfs"
    r = convert_files_to_pdf(src, dest)
    assert r.failed == [1]
    assert r.pdf_paths == [dest / "0.image.pdf", dest / "2.image.pdf"]
    assert not r.ok


def test_convert_files_empty(tmp_path) -> None:
    r = convert_files_to_pdf(tmp_path, tmp_path / "out")
    assert r.pdf_paths == []
    assert not r.ok


@needs_weasyprint
def test_code_to_pdf(tmp_path) -> None:
    f = tmp_path / "001.code.java"
    f.write_text("class Hello {\n\tpublic static void main(String[] a) {}\n}\n")
    item = StagedFile(idx=1, kind="code", path=f, ext=".java")
    out = tmp_path / "1.code.pdf"
    assert convert_to_pdf(item, out)
    with pymupdf.open(out) as doc:
        r = doc[0].rect
        text = doc[0].get_text()
    assert (round(r.width), round(r.height)) == (595, 842)
    assert "Hello" in text


@needs_weasyprint
def test_cover_to_pdf(tmp_path) -> None:
    f = tmp_path / "000.cover.html"
    f.write_text("<h1>Jane Smith</h1><p>Portfolio</p>")
    item = StagedFile(idx=0, kind="cover", path=f, ext=".html")
    out = tmp_path / "0.cover.pdf"
    assert convert_to_pdf(item, out)
    with pymupdf.open(out) as doc:
        assert "Jane Smith" in doc[0].get_text()


def test_render_timeout_leaves_nothing(tmp_path) -> None:
    f = tmp_path / "000.cover.html"
    f.write_text("<p>hi</p>")
    item = StagedFile(idx=0, kind="cover", path=f, ext=".html")
    cfg = dict(default_config, render_timeout=0.001)
    out = tmp_path / "0.cover.pdf"
    assert not convert_to_pdf(item, out, config=cfg)
    assert not out.exists()
