# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Building task PDFs and portfolios from what students upload."""

__copyright__ = "Copyright (C) 2013-2026 The Doubtfire Developers"
__credits__ = "The Doubtfire Developers"
__license__ = "AGPL-3.0-or-later"

from .submission import stage_upload, accept_upload
from .submission import process_task_submission, process_pending, task_pdf_path
from .portfolio import portfolio_path, portfolio_available
from .portfolio import add_portfolio_file, list_portfolio_files
from .portfolio import remove_portfolio_file, remove_portfolio
from .portfolio import compile_portfolio, portfolio_or_placeholder
from .portfolio import unit_portfolio_zip
from .plagiarism import record_plagiarism_match, record_plagiarism_pair
from .plagiarism import delete_plagiarism_match, dismiss_plagiarism_match

__all__ = [
    "stage_upload",
    "accept_upload",
    "process_task_submission",
    "process_pending",
    "task_pdf_path",
    "portfolio_path",
    "portfolio_available",
    "add_portfolio_file",
    "list_portfolio_files",
    "remove_portfolio_file",
    "remove_portfolio",
    "compile_portfolio",
    "portfolio_or_placeholder",
    "unit_portfolio_zip",
    "record_plagiarism_match",
    "record_plagiarism_pair",
    "delete_plagiarism_match",
    "dismiss_plagiarism_match",
]
