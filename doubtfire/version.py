# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Version of the Doubtfire core, read by setup.py without importing."""

__version__ = "0.3.1.dev0"
