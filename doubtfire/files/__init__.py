# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Checking, converting and storing the files students submit."""

__copyright__ = "Copyright (C) 2013-2026 The Doubtfire Developers"
__credits__ = "The Doubtfire Developers"
__license__ = "AGPL-3.0-or-later"

from .accept import accept_file, sniff_mime
from .paths import sanitized_path, sanitized_filename
from .paths import student_work_dir, student_portfolio_dir, move_files
from .pdf_tools import pdf_valid, compress_pdf, aggregate, pdf_page_count
from .convert import convert_to_pdf, convert_files_to_pdf, StagedFile
from .file_helper import FileHelper

__all__ = [
    "accept_file",
    "sniff_mime",
    "sanitized_path",
    "sanitized_filename",
    "student_work_dir",
    "student_portfolio_dir",
    "move_files",
    "pdf_valid",
    "compress_pdf",
    "aggregate",
    "pdf_page_count",
    "convert_to_pdf",
    "convert_files_to_pdf",
    "StagedFile",
    "FileHelper",
]
