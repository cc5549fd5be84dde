# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Turn staged uploads (images, code, documents, cover sheets) into PDFs.

Each staged file is named ``NNN.kind.ext`` where ``NNN`` is its
position, and is converted on its own into ``<idx>.<kind>.pdf`` before
the results are joined together.  HTML is rendered to PDF by running
WeasyPrint as a separate, time-limited process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import re
import shutil
import sys
import tempfile
from textwrap import dedent
from typing import Any

import PIL.Image
import PIL.ImageOps
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import CLexer, CppLexer, DelphiLexer, JavaLexer

from doubtfire.config import default_config
from doubtfire.files.external import run_tool
from doubtfire.files.pdf_tools import copy_pdf
from doubtfire.misc_utils import format_int_list_with_runs


log = logging.getLogger("files")

staged_name_re = re.compile(r"^(\d{3})\.(cover|document|code|image)")

code_page_css = """
@page {
  size: A4;
  margin: 10mm 5mm 5mm 5mm;
  @top-right {
    content: counter(page) "/" counter(pages);
    font-size: 8pt;
  }
}
body { font-size: 8pt; }
.code pre { margin: 0; white-space: pre-wrap; font-size: 8pt; }
.code table { border-collapse: collapse; }
.code .linenos { color: #777; padding-right: 6px; border-right: 1px solid #ccc; }
.code td.code { padding-left: 6px; }
"""

cover_page_css = """
@page {
  size: A4;
  margin: 30mm;
}
body { font-family: sans-serif; }
h1 { font-size: 20pt; }
table, th, td {
  border: 1px solid black;
  border-collapse: collapse;
  padding: 4px;
}
"""


@dataclass
class StagedFile:
    """One file of a staged upload set."""

    idx: int
    kind: str
    path: Path
    ext: str


@dataclass
class ConversionResult:
    """What came out of converting a directory of staged files.

    ``pdf_paths`` is in staged order and omits failed items, whose
    indices are in ``failed``.
    """

    pdf_paths: list[Path] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.pdf_paths) and not self.failed


def staged_files(from_path) -> list[StagedFile]:
    """List the staged files in a directory, in index order.

    Only files named like ``000.code.java`` are considered.
    """
    files = []
    for f in Path(from_path).iterdir():
        m = staged_name_re.match(f.name)
        if not m or not f.is_file():
            continue
        files.append(
            StagedFile(
                idx=int(m.group(1)), kind=m.group(2), path=f, ext=f.suffix.lower()
            )
        )
    files.sort(key=lambda x: x.idx)
    return files


def render_html_to_pdf(html: str, outfile, *, timeout: float = 120) -> bool:
    """Render an HTML string to a PDF file using a WeasyPrint subprocess.

    Returns:
        True on success.  On failure or timeout nothing is written to
        ``outfile``.
    """
    with tempfile.TemporaryDirectory(prefix="doubtfire-render-") as tmpdir:
        src = Path(tmpdir) / "page.html"
        out = Path(tmpdir) / "page.pdf"
        src.write_text(html, encoding="utf-8")
        ok = run_tool(
            [sys.executable, "-m", "weasyprint", str(src), str(out)],
            timeout=timeout,
            cwd=tmpdir,
        )
        if not ok or not out.is_file():
            log.error("Failed to render html to %s", outfile)
            return False
        shutil.move(out, outfile)
    return True


def _html_page(body: str, css: str, *, title: str = "") -> str:
    return dedent(
        """\
        <!DOCTYPE html>
        <html>
        <head>
        <meta charset="utf-8">
        <title>{title}</title>
        <style>
        {css}
        </style>
        </head>
        <body>
        {body}
        </body>
        </html>
        """
    ).format(title=title, css=css, body=body)


def lexer_for_extension(ext: str):
    """Choose a syntax highlighter from a file extension such as ``".cpp"``."""
    ext = ext.lower()
    if ext in (".cpp", ".cs"):
        return CppLexer(tabsize=2)
    if ext in (".c", ".h"):
        return CLexer(tabsize=2)
    if ext == ".java":
        return JavaLexer(tabsize=2)
    if ext == ".pas":
        return DelphiLexer(tabsize=2)
    # should follow basic C syntax (if, else etc...)
    return CLexer(tabsize=2)


def code_to_html(code: str, ext: str, *, title: str = "") -> str:
    """Highlighted, line-numbered HTML page of some source code."""
    formatter = HtmlFormatter(linenos="table", cssclass="code", wrapcode=True)
    body = highlight(code, lexer_for_extension(ext), formatter)
    css = code_page_css + formatter.get_style_defs(".code")
    return _html_page(body, css, title=title)


def code_to_pdf(src, outfile, *, ext: str | None = None, timeout: float = 120) -> bool:
    """Render a source code file as a syntax-highlighted A4 PDF."""
    src = Path(src)
    ext = ext if ext is not None else src.suffix
    code = src.read_text(encoding="utf-8", errors="replace")
    return render_html_to_pdf(code_to_html(code, ext), outfile, timeout=timeout)


def img_to_pdf(src, outfile, *, max_dimension: int = 1000, quality: int = 75) -> bool:
    """Convert an image to a one-page PDF, shrinking it if it is too big.

    Images (e.g., taken with a digital camera) larger than
    ``max_dimension`` on either side are scaled down preserving their
    aspect ratio, so that the larger side is exactly ``max_dimension``.
    """
    try:
        with PIL.Image.open(src) as im:
            # fitz and friends do not respect exif rotations
            im = PIL.ImageOps.exif_transpose(im)
            w, h = im.size
            if w > max_dimension or h > max_dimension:
                scale = max_dimension / max(w, h)
                size = (max(1, round(w * scale)), max(1, round(h * scale)))
                im = im.resize(size, PIL.Image.LANCZOS)
            im = _flatten_to_rgb(im)
            im.save(outfile, "PDF", quality=quality, resolution=96.0)
    except (OSError, ValueError, PIL.Image.DecompressionBombError) as e:
        log.error("Failed to convert image %s to pdf: %s", src, e)
        return False
    return True


def _flatten_to_rgb(im):
    if im.mode in ("RGBA", "LA") or (im.mode == "P" and "transparency" in im.info):
        im = im.convert("RGBA")
        bg = PIL.Image.new("RGB", im.size, (255, 255, 255))
        bg.paste(im, mask=im.split()[-1])
        return bg
    if im.mode != "RGB":
        return im.convert("RGB")
    return im


def doc_to_pdf(src, outfile, **kw) -> bool:
    """Put an uploaded document into place; only PDFs are supported.

    TODO: other document formats (e.g., docx) would need a converter.
    """
    return copy_pdf(src, outfile, **kw)


def cover_to_pdf(src, outfile, *, timeout: float = 120) -> bool:
    """Render a cover sheet, written in HTML, to an A4 PDF."""
    html = Path(src).read_text(encoding="utf-8", errors="replace")
    return render_html_to_pdf(cover_html_page(html), outfile, timeout=timeout)


def cover_html_page(body: str, *, title: str = "") -> str:
    """Wrap the body of a cover sheet in a page with the cover styling."""
    return _html_page(body, cover_page_css, title=title)


def convert_to_pdf(
    item: StagedFile, outfile, *, config: dict[str, Any] | None = None
) -> bool:
    """Convert one staged file to a PDF according to its kind.

    Args:
        item: the staged file.
        outfile (str/pathlib.Path): where the PDF should go.

    Keyword Args:
        config: settings such as timeouts and tool names, see
            :mod:`doubtfire.config`.  Defaults if omitted.

    Returns:
        True on success.  Not expected to raise any exceptions.
    """
    cfg = config if config is not None else default_config
    try:
        if item.kind == "image":
            return img_to_pdf(
                item.path,
                outfile,
                max_dimension=cfg["image_max_dimension"],
                quality=cfg["image_quality"],
            )
        if item.kind == "code":
            return code_to_pdf(
                item.path, outfile, ext=item.ext, timeout=cfg["render_timeout"]
            )
        if item.kind == "document":
            return doc_to_pdf(
                item.path,
                outfile,
                pdftk=cfg["pdftk"],
                check_timeout=cfg["pdf_check_timeout"],
                threshold=cfg["compress_threshold_bytes"],
                timeout=cfg["compress_timeout"],
                ghostscript=cfg["ghostscript"],
                imagemagick=cfg["imagemagick"],
            )
        if item.kind == "cover":
            return cover_to_pdf(item.path, outfile, timeout=cfg["render_timeout"])
    except OSError as e:
        log.error("Failed to convert %s: %s", item.path, e)
        return False
    log.error("Unknown kind '%s' for %s", item.kind, item.path)
    return False


def convert_files_to_pdf(
    from_path, dest_path, *, config: dict[str, Any] | None = None
) -> ConversionResult:
    """Convert every staged file in a directory into its own PDF.

    Args:
        from_path (str/pathlib.Path): directory of staged files.
        dest_path (str/pathlib.Path): where to write ``<idx>.<kind>.pdf``
            files; created if needed.

    Keyword Args:
        config: settings, see :func:`convert_to_pdf`.

    Returns:
        The converted paths in order, and the indices of any failures.
        A failed file is left out rather than spoiling the whole set.
    """
    result = ConversionResult()
    files = staged_files(from_path)
    if not files:
        log.error("No files found in %s", from_path)
        return result

    dest_path = Path(dest_path)
    dest_path.mkdir(parents=True, exist_ok=True)
    for f in files:
        outpath = dest_path / f"{f.idx}.{f.kind}.pdf"
        if convert_to_pdf(f, outpath, config=config):
            result.pdf_paths.append(outpath)
        else:
            result.failed.append(f.idx)
    if result.failed:
        log.warning(
            "Could not convert file(s) %s in %s",
            format_int_list_with_runs(result.failed, use_unicode=False),
            from_path,
        )
    return result
