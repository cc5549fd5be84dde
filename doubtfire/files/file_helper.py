# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""File operations bound to one configuration.

Anything that needs to store, check or convert files is handed a
:class:`FileHelper` rather than reaching for global settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from doubtfire.config import default_config
from doubtfire.files.accept import accept_file
from doubtfire.files.convert import (
    ConversionResult,
    convert_files_to_pdf,
    convert_to_pdf,
    render_html_to_pdf,
)
from doubtfire.files.paths import (
    move_files,
    student_portfolio_dir,
    student_work_dir,
)
from doubtfire.files.pdf_tools import aggregate, compress_pdf, pdf_valid


log = logging.getLogger("files")


class FileHelper:
    """File storage and conversion using the given settings.

    Args:
        config: a dict of settings as from
            :func:`doubtfire.config.load_config`; defaults if omitted.
    """

    def __init__(self, config: dict[str, Any] | None = None):
        self.config = default_config.copy()
        if config:
            self.config.update(config)
        self.root = Path(self.config["student_work_dir"])

    def _pdf_check_kw(self) -> dict[str, Any]:
        return {
            "timeout": self.config["pdf_check_timeout"],
            "pdftk": self.config["pdftk"],
        }

    def _compress_kw(self) -> dict[str, Any]:
        return {
            "threshold": self.config["compress_threshold_bytes"],
            "timeout": self.config["compress_timeout"],
            "ghostscript": self.config["ghostscript"],
            "imagemagick": self.config["imagemagick"],
        }

    def accept_file(self, upload, name: str, kind: str) -> bool:
        return accept_file(upload, name, kind, **self._pdf_check_kw())

    def pdf_valid(self, path) -> bool:
        return pdf_valid(path, **self._pdf_check_kw())

    def compress_pdf(self, path) -> bool:
        return compress_pdf(path, **self._compress_kw())

    def aggregate(self, pdf_paths: Sequence, final_pdf_path) -> bool:
        return aggregate(
            pdf_paths,
            final_pdf_path,
            timeout=self.config["aggregate_timeout"],
            pdftk=self.config["pdftk"],
            **self._compress_kw(),
        )

    def convert_files_to_pdf(self, from_path, dest_path) -> ConversionResult:
        return convert_files_to_pdf(from_path, dest_path, config=self.config)

    def convert_to_pdf(self, item, outfile) -> bool:
        return convert_to_pdf(item, outfile, config=self.config)

    def render_html_to_pdf(self, html: str, outfile) -> bool:
        return render_html_to_pdf(html, outfile, timeout=self.config["render_timeout"])

    def student_work_dir(self, kind=None, task=None, *, create=True) -> Path:
        return student_work_dir(self.root, kind, task, create=create)

    def student_portfolio_dir(self, project, *, create=True) -> Path:
        return student_portfolio_dir(self.root, project, create=create)

    def move_files(self, from_path, to_path) -> None:
        move_files(from_path, to_path)

    # plagiarism reports are stored beside the work they are about

    def path_to_plagiarism_html(self, task, other_task, *, create=True) -> Path:
        to_dir = self.student_work_dir("plagiarism", task, create=create)
        return to_dir / f"link_{other_task.id}.html"

    def save_plagiarism_html(self, task, other_task, html: str) -> Path:
        f = self.path_to_plagiarism_html(task, other_task)
        f.write_text(html, encoding="utf-8")
        return f

    def delete_plagiarism_html(self, task, other_task) -> None:
        """Remove the report, and its directory if that was the last one."""
        f = self.path_to_plagiarism_html(task, other_task, create=False)
        if not f.exists():
            return
        f.unlink()
        to_dir = f.parent
        if not any(to_dir.glob("*.html")):
            log.debug("No more plagiarism reports in %s, removing", to_dir)
            for leftover in to_dir.iterdir():
                leftover.unlink()
            to_dir.rmdir()
