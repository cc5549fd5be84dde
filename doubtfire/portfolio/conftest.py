# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from pathlib import Path

import pymupdf
import pytest

from doubtfire.files import FileHelper


class PyMuPDFFiles(FileHelper):
    """FileHelper that needs no external tools: pdftk and weasyprint are mimicked with PyMuPDF."""

    def __init__(self, config=None, *, reject=()):
        super().__init__(config)
        self.reject = set(reject)
        self.rendered = []

    def accept_file(self, upload, name, kind):
        return name not in self.reject

    def aggregate(self, pdf_paths, final_pdf_path):
        if not pdf_paths:
            return False
        with pymupdf.open() as out:
            for p in pdf_paths:
                with pymupdf.open(p) as d:
                    out.insert_pdf(d)
            Path(final_pdf_path).parent.mkdir(parents=True, exist_ok=True)
            out.save(final_pdf_path)
        return True

    def render_html_to_pdf(self, html, outfile):
        self.rendered.append(html)
        with pymupdf.open() as d:
            d.new_page().insert_text((72, 72), "cover")
            d.save(outfile)
        return True


@pytest.fixture
def fh(tmp_path):
    return PyMuPDFFiles({"student_work_dir": str(tmp_path / "work")})
