# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Doubtfire tracks student tasks, submissions and portfolios.

Students submit work against the tasks of a unit, staff assess it, and
the submitted files are converted into PDFs that are later compiled
into a portfolio for each student.
"""

__copyright__ = "Copyright (C) 2013-2026 The Doubtfire Developers"
__credits__ = "The Doubtfire Developers"
__license__ = "AGPL-3.0-or-later"

from .version import __version__

from .task_status import TaskStatus, Role

__all__ = ["__version__", "TaskStatus", "Role"]
