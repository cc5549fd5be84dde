# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Doubtfire database stuff."""

__copyright__ = "Copyright (C) 2013-2026 The Doubtfire Developers"
__credits__ = "The Doubtfire Developers"
__license__ = "AGPL-3.0-or-later"


from .doubtfireDB import DoubtfireDB

__all__ = [
    "DoubtfireDB",
]
