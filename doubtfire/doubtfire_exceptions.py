# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Exceptions for the Doubtfire core.

Serious exceptions are for unexpected things that we probably cannot
sanely or safely recover from.  Benign are for signaling expected (or
at least not unexpected) situations.
"""


class DoubtfireException(Exception):
    """Catch-all parent of all Doubtfire-related exceptions."""

    pass


class DoubtfireSeriousException(DoubtfireException):
    """Serious or unexpected problems that are generally not recoverable."""

    pass


class DoubtfireBenignException(DoubtfireException):
    """A not-unexpected situation, often signaling an error condition."""

    pass


class DoubtfireIllegalTransition(DoubtfireBenignException):
    """The trigger is unknown or the task cannot move from its current state."""

    pass


class DoubtfireNoPermission(DoubtfireBenignException):
    """You don't have permission, e.g., to assess that task or delete that comment."""

    def __init__(self, msg=None):
        if not msg:
            msg = "You do not have permission to do that."
        super().__init__(msg)


class DoubtfireRangeException(DoubtfireBenignException):
    pass


class DoubtfireUploadRejected(DoubtfireBenignException):
    """An uploaded file is not acceptable for the kind it was declared as."""

    pass


class DoubtfireNoFilesException(DoubtfireBenignException):
    """There was nothing staged to work on."""

    pass


class DoubtfirePipelineError(DoubtfireSeriousException):
    """Conversion or aggregation of submitted files failed."""

    pass


class DoubtfireConfigError(DoubtfireSeriousException):
    pass
