# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Checking, shrinking and joining PDF files.

The heavy lifting is done by external tools (pdftk, ghostscript,
ImageMagick), each run under a time limit: a slow or hostile file must
never hang the caller.  Any overrun is a failure.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
import tempfile
from typing import Sequence

import pymupdf

from doubtfire.files.external import run_tool


log = logging.getLogger("files")

compress_threshold = 1200000


def pdf_valid(path, *, timeout: float = 30, pdftk: str = "pdftk") -> bool:
    """Is this a structurally sound PDF file?

    Asks pdftk to rewrite the file to nowhere; corrupt files make it
    fail.  A timeout also counts as invalid.
    """
    if not Path(path).is_file():
        log.info("No such file to check: %s", path)
        return False
    return run_tool(
        [pdftk, str(path), "output", os.devnull, "dont_ask"], timeout=timeout
    )


def pdf_page_count(path) -> int:
    """Number of pages in a PDF, as counted by PyMuPDF."""
    with pymupdf.open(path) as doc:
        return len(doc)


def compress_pdf(
    path,
    *,
    threshold: int = compress_threshold,
    timeout: float = 120,
    ghostscript: str = "gs",
    imagemagick: str = "convert",
) -> bool:
    """Try to make a large PDF file smaller, replacing it in place.

    Small files are left alone.  Otherwise we try ghostscript and then
    ImageMagick, each under the time limit.  Compression is best-effort:
    if both fail the original file is untouched.

    Args:
        path (str/pathlib.Path): the PDF file to compress.

    Keyword Args:
        threshold: files under this many bytes are not compressed.
        timeout: seconds allowed for each tool.
        ghostscript: name of the ghostscript command.
        imagemagick: name of the ImageMagick ``convert`` command.

    Returns:
        True if the file was replaced with a compressed version, False
        if it was too small or compression failed.
    """
    path = Path(path)
    try:
        size = path.stat().st_size
    except OSError as e:
        log.error("Failed to compress pdf: %s: %s", path, e)
        return False
    if size < threshold:
        return False

    with tempfile.TemporaryDirectory(prefix="doubtfire-compress-") as tmpdir:
        tmp_file = Path(tmpdir) / f"{path.parent.name}-file.pdf"
        ok = run_tool(
            [
                ghostscript,
                "-sDEVICE=pdfwrite",
                "-dCompatibilityLevel=1.3",
                "-dDetectDuplicateImages=true",
                "-dPDFSETTINGS=/screen",
                "-dNOPAUSE",
                "-dBATCH",
                "-dQUIET",
                f"-sOutputFile={tmp_file}",
                str(path),
            ],
            timeout=timeout,
        )
        if not ok or not _nonempty(tmp_file):
            log.info("Failed to compress pdf: %s using gs", path)
            tmp_file.unlink(missing_ok=True)
            ok = run_tool(
                [imagemagick, str(path), "-compress", "Zip", str(tmp_file)],
                timeout=timeout,
            )
        if not ok or not _nonempty(tmp_file):
            log.error("Failed to compress pdf: %s", path)
            return False
        shutil.move(tmp_file, path)
    log.debug("Compressed %s from %d to %d bytes", path, size, path.stat().st_size)
    return True


def _nonempty(f: Path) -> bool:
    return f.is_file() and f.stat().st_size > 0


def copy_pdf(src, dest, *, pdftk: str = "pdftk", check_timeout: float = 30, **kw) -> bool:
    """Validate, compress and copy a PDF into place.

    Keyword arguments other than ``pdftk`` and ``check_timeout`` are
    passed to :func:`compress_pdf`.

    Returns:
        False, with nothing copied, if the source is not a valid PDF.
    """
    if not pdf_valid(src, timeout=check_timeout, pdftk=pdftk):
        log.warning("Not copying invalid pdf %s", src)
        return False
    compress_pdf(src, **kw)
    shutil.copyfile(src, dest)
    return True


def aggregate(
    pdf_paths: Sequence,
    final_pdf_path,
    *,
    timeout: float = 180,
    pdftk: str = "pdftk",
    **kw,
) -> bool:
    """Join a list of PDFs, in order, into a single compressed PDF file.

    Args:
        pdf_paths: the PDF files to concatenate.
        final_pdf_path (str/pathlib.Path): where to write the result.
            Nothing is written here on failure.

    Keyword Args:
        timeout: seconds allowed for pdftk.
        pdftk: name of the pdftk command.
        Others are passed to :func:`compress_pdf`.

    Returns:
        True on success.  Not expected to raise any exceptions.
    """
    final_pdf_path = Path(final_pdf_path)
    if not pdf_paths:
        log.error("Nothing to aggregate into %s", final_pdf_path)
        return False
    final_pdf_path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryDirectory(prefix="doubtfire-aggregate-") as tmpdir:
        out = Path(tmpdir) / "aggregate.pdf"
        cmd = [pdftk, *[str(p) for p in pdf_paths]]
        cmd.extend(["cat", "output", str(out), "dont_ask", "compress"])
        if not run_tool(cmd, timeout=timeout) or not _nonempty(out):
            log.error(
                "failed to create %s\n -> %s", final_pdf_path, " ".join(cmd)
            )
            return False
        shutil.move(out, final_pdf_path)
    compress_pdf(final_pdf_path, **kw)
    return True
