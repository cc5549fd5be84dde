# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Run external tools under a hard wall-clock limit."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
from typing import Sequence


log = logging.getLogger("files")


def run_tool(cmd: Sequence[str], *, timeout: float, cwd=None) -> bool:
    """Run a command, waiting at most ``timeout`` seconds for it.

    The command runs in its own process group.  On expiry the whole
    group is killed, including anything the tool started itself (for
    example the ghostscript that ImageMagick runs on PDF input).

    Args:
        cmd: the command and its arguments, not passed through a shell.

    Keyword Args:
        timeout: seconds to wait before killing the process.
        cwd: optional working directory.

    Returns:
        True if the command finished in time with exit status zero,
        else False.  Output is logged at debug level.

    Raises:
        Not expected to raise any exceptions.
    """
    cmd = [str(x) for x in cmd]
    try:
        p = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )
    except OSError as e:
        log.error("Could not run %s: %s", cmd[0], e)
        return False
    try:
        out, _ = p.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        try:
            os.killpg(p.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        p.communicate()
        log.error("Killed %s after %s seconds", cmd[0], timeout)
        return False
    if p.returncode != 0:
        log.info(
            "%s exited with %d: %s",
            cmd[0],
            p.returncode,
            out.decode(errors="replace").strip(),
        )
        return False
    if out:
        log.debug("%s: %s", cmd[0], out.decode(errors="replace").strip())
    return True
