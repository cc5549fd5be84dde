# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from datetime import datetime, timedelta

import arrow

from doubtfire.misc_utils import format_int_list_with_runs
from doubtfire.misc_utils import is_within_one_hour_of_now, utc_now


def test_runs() -> None:
    assert format_int_list_with_runs([]) == ""
    assert format_int_list_with_runs([2]) == "2"
    assert format_int_list_with_runs([1, 2, 3], use_unicode=False) == "1-3"
    L = ["1", "2", "3", "4", "7", "10", "11", "12", "13", "14", "64"]
    out = format_int_list_with_runs(L, use_unicode=False)
    assert out == "1-4, 7, 10-14, 64"


def test_runs_pairs_not_collapsed() -> None:
    assert format_int_list_with_runs([4, 5], use_unicode=False) == "4, 5"


def test_runs_zero_padding() -> None:
    out = format_int_list_with_runs([1, 2, 3, 9], zero_padding=3, use_unicode=False)
    assert out == "001-003, 009"


def test_utc_now_is_naive() -> None:
    now = utc_now()
    assert isinstance(now, datetime)
    assert now.tzinfo is None
    assert abs(arrow.get(now) - arrow.utcnow()) < timedelta(seconds=5)


def test_within_hour() -> None:
    assert is_within_one_hour_of_now(utc_now())
    assert is_within_one_hour_of_now(utc_now() - timedelta(minutes=59))
    assert not is_within_one_hour_of_now(utc_now() - timedelta(minutes=61))


def test_within_hour_explicit_reference() -> None:
    ref = datetime(2024, 3, 1, 12, 0, 0)
    assert is_within_one_hour_of_now(datetime(2024, 3, 1, 11, 30), now=ref)
    assert not is_within_one_hour_of_now(datetime(2024, 3, 1, 11, 0), now=ref)
    assert not is_within_one_hour_of_now(datetime(2024, 3, 1, 9, 0), now=ref)
