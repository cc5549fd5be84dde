# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import json
import logging

from doubtfire.db.tables import User, Unit, UnitRole, TaskDefinition, Project, Task
from doubtfire.doubtfire_exceptions import DoubtfireRangeException
from doubtfire.task_status import Role


log = logging.getLogger("DB")


# ------------------
# Users, units and enrolments


def create_user(self, username, name=None, *, email=None):
    with self._db.atomic():
        uref = User.create(username=username, name=name, email=email)
    log.info('Created user "%s"', username)
    return uref


def get_user(self, username):
    """Find a user by username, or None."""
    return User.get_or_none(username=username)


def create_unit(self, code, name=""):
    with self._db.atomic():
        unit = Unit.create(code=code, name=name)
    log.info("Created unit %s-%s", unit.code, unit.id)
    return unit


def employ_staff(self, user, unit, role):
    """Give a user a staff role in a unit, replacing any previous staff role.

    Args:
        user (User): who.
        unit (Unit): where.
        role (Role): tutor or convenor.

    Raises:
        DoubtfireRangeException: students are enrolled, not employed.
    """
    role = Role(role)
    if role == Role.student:
        raise DoubtfireRangeException("Students are enrolled, not employed")
    with self._db.atomic():
        uref = UnitRole.get_or_none(user=user, unit=unit)
        if uref is None:
            uref = UnitRole.create(user=user, unit=unit, role=role.value)
        else:
            uref.role = role.value
            uref.save()
    log.info('User "%s" is %s in unit %s', user.username, role, unit.code)
    return uref


def enrol_student(self, user, unit):
    """Enrol a student, creating their project and a task per task definition.

    Enrolling someone twice returns their existing project.
    """
    with self._db.atomic():
        project = Project.get_or_none(unit=unit, student=user)
        if project is not None:
            return project
        project = Project.create(unit=unit, student=user)
        for td in unit.task_definitions:
            Task.create(project=project, task_definition=td)
    log.info('Enrolled "%s" in unit %s', user.username, unit.code)
    return project


def add_task_definition(
    self,
    unit,
    name,
    abbreviation,
    *,
    target_date,
    weighting=1.0,
    description="",
    upload_requirements=None,
):
    """Add a task to a unit, creating it for each student already enrolled.

    Args:
        upload_requirements (list/None): list of dicts with keys "key",
            "name" and "type", the latter one of "document", "code" or
            "image".
    """
    upload_requirements = upload_requirements if upload_requirements else []
    for req in upload_requirements:
        if req.get("type") not in ("document", "code", "image"):
            raise DoubtfireRangeException(
                f'Upload requirement "{req.get("name")}" has bad type "{req.get("type")}"'
            )
    with self._db.atomic():
        td = TaskDefinition.create(
            unit=unit,
            name=name,
            abbreviation=abbreviation,
            description=description,
            weighting=weighting,
            target_date=target_date,
            upload_requirements=json.dumps(upload_requirements),
        )
        for project in unit.projects:
            Task.create(project=project, task_definition=td)
    log.info("Added task %s to unit %s", abbreviation, unit.code)
    return td


def role_for(self, project, user):
    """The role a user has in a project, or None if they have none.

    The project's own student is a student; staff of the unit have
    their staff role.
    """
    if user is None:
        return None
    if project.student_id == user.id:
        return Role.student
    uref = UnitRole.get_or_none(user=user, unit=project.unit)
    if uref is None:
        return None
    return Role(uref.role)


def tutors_of(self, unit):
    query = (
        User.select()
        .join(UnitRole)
        .where(UnitRole.unit == unit, UnitRole.role == Role.tutor.value)
    )
    return list(query)


def students_of(self, unit):
    return [p.student for p in unit.projects]
