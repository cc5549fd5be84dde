# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from __future__ import annotations

from datetime import datetime
import math
import sys
from typing import Any, Sequence

import arrow


# ------------------------------------------------
# some time conversion tools put here nice and central


def utc_now() -> datetime:
    """The time now in UTC, as a naive datetime suitable for the database."""
    return arrow.utcnow().naive


def local_now_to_simple_string():
    return arrow.utcnow().to("local").format("YYYY-MM-DD [at] HH:mm ZZZ")


def is_within_one_hour_of_now(timestamp, *, now=None) -> bool:
    """Is the timestamp less than one hour before now?

    Naive timestamps are taken to be in UTC.  Pass ``now`` to compare
    against some other reference time.
    """
    now = arrow.get(now) if now is not None else arrow.utcnow()
    if arrow.get(timestamp) > now.shift(hours=-1):
        return True
    else:
        return False


# ---------------------------------------------
# tools for printing lists and other miscellany
# ---------------------------------------------


def format_int_list_with_runs(
    L: Sequence[str | int],
    *,
    use_unicode: None | bool = None,
    zero_padding: None | int = None,
) -> str:
    """Replace runs in a list with a range notation.

    Args:
        L: a list of integers (or strings that can be converted to
            integers).  Need not be sorted (we will sort a copy).

    Keyword Args:
        use_unicode: by default auto-detect from UTF-8 in stdout encoding
            or a boolean value to force on/off.  If we have unicode, then
            en-dash is used instead of hyphen to indicate ranges.
        zero_padding: if specified, pad each integer with this many zeros.
            By default (or on ``None``) don't do that.

    Returns:
        A string with comma-separated list, with dashed range notations
        for contiguous runs.  For example: ``"1, 2-5, 10-45, 64"``.
    """
    if use_unicode is None:
        if "utf-8" in str(sys.stdout.encoding).casefold():
            use_unicode = True
        else:
            use_unicode = False
    dash = "\N{EN DASH}" if use_unicode else "-"
    L2 = _find_runs(sorted([int(x) for x in L]))
    L3 = _flatten_2len_runs(L2)
    z = zero_padding if zero_padding else 0
    L4 = [
        f"{x[0]:0{z}}{dash}{x[-1]:0{z}}" if isinstance(x, list) else f"{x:0{z}}"
        for x in L3
    ]
    return ", ".join(L4)


def _find_runs(S: list[int]) -> list[list[int]]:
    L = []
    prev = -math.inf
    run: list[int] = []
    for x in S:
        if x - prev == 1:
            run.append(x)
        else:
            run = [x]
            L.append(run)
        prev = x
    return L


def _flatten_2len_runs(L: list[Any]) -> list[Any]:
    L2 = []
    for x in L:
        if len(x) < 3:
            L2.extend(x)
        else:
            L2.append(x)
    return L2
