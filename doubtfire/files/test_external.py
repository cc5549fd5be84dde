# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import sys
import time

from doubtfire.files.external import run_tool


def test_run_tool_success() -> None:
    assert run_tool([sys.executable, "-c", "print('hi')"], timeout=30)


def test_run_tool_nonzero_exit() -> None:
    assert not run_tool([sys.executable, "-c", "import sys; sys.exit(3)"], timeout=30)


def test_run_tool_missing_binary() -> None:
    assert not run_tool(["no-such-doubtfire-tool", "--help"], timeout=5)


def test_run_tool_is_killed_on_timeout() -> None:
    t0 = time.monotonic()
    r = run_tool([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
    assert not r
    assert time.monotonic() - t0 < 10


def test_run_tool_cwd(tmp_path) -> None:
    code = "open('made_here.txt', 'w').write('x')"
    assert run_tool([sys.executable, "-c", code], timeout=30, cwd=tmp_path)
    assert (tmp_path / "made_here.txt").exists()


def test_run_tool_timeout_kills_tools_children(tmp_path) -> None:
    marker = tmp_path / "child_survived.txt"
    child = f"import pathlib, time; time.sleep(2); pathlib.Path({str(marker)!r}).write_text('x')"
    wrapper = (
        "import subprocess, sys, time; "
        f"subprocess.Popen([sys.executable, '-c', {child!r}]); "
        "time.sleep(30)"
    )
    t0 = time.monotonic()
    assert not run_tool([sys.executable, "-c", wrapper], timeout=0.5)
    assert time.monotonic() - t0 < 10
    time.sleep(3)
    assert not marker.exists()
