# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

from datetime import date, timedelta
from types import SimpleNamespace

import pytest

from doubtfire.db import DoubtfireDB
from doubtfire.task_status import Role


@pytest.fixture
def db():
    d = DoubtfireDB(":memory:")
    yield d
    d.close()


@pytest.fixture
def course(db):
    """A unit with one student, one tutor, one convenor and two tasks."""
    unit = db.create_unit("COS10001", "Intro to Programming")
    td1 = db.add_task_definition(
        unit,
        "Hello World",
        "1.1P",
        target_date=date.today() + timedelta(days=14),
        weighting=1.0,
        upload_requirements=[{"key": "file0", "name": "Code", "type": "code"}],
    )
    td2 = db.add_task_definition(
        unit, "Loops", "2.1P", target_date=date.today() + timedelta(days=28), weighting=3.0
    )
    student = db.create_user("alex", "Alex Student")
    tutor = db.create_user("sam", "Sam Tutor")
    convenor = db.create_user("kim", "Kim Convenor")
    db.employ_staff(tutor, unit, Role.tutor)
    db.employ_staff(convenor, unit, Role.convenor)
    project = db.enrol_student(student, unit)
    return SimpleNamespace(
        unit=unit,
        student=student,
        tutor=tutor,
        convenor=convenor,
        project=project,
        td1=td1,
        td2=td2,
        task=db.get_task(project, td1),
        task2=db.get_task(project, td2),
    )
