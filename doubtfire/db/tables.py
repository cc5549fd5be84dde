# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import json

import peewee as pw

from doubtfire.task_status import TaskStatus


database_proxy = pw.Proxy()


class BaseModel(pw.Model):
    class Meta:
        database = database_proxy


class User(BaseModel):
    username = pw.CharField(unique=True)  # short, system generated
    name = pw.TextField(null=True)  # can be long
    email = pw.CharField(null=True)


class Unit(BaseModel):
    code = pw.CharField()  # e.g., "COS10001"
    name = pw.TextField(default="")
    active = pw.BooleanField(default=True)


class UnitRole(BaseModel):
    # staff only: students are linked to a unit through their Project
    user = pw.ForeignKeyField(User, backref="unit_roles")
    unit = pw.ForeignKeyField(Unit, backref="unit_roles")
    role = pw.CharField()  # "tutor" or "convenor"


class TaskDefinition(BaseModel):
    unit = pw.ForeignKeyField(Unit, backref="task_definitions")
    name = pw.TextField()
    abbreviation = pw.CharField()
    description = pw.TextField(default="")
    weighting = pw.FloatField(default=0.0)
    target_date = pw.DateField()
    # list of {"key", "name", "type"} dicts, stored as json
    upload_requirements = pw.TextField(default=json.dumps([]))

    def get_upload_requirements(self):
        return json.loads(self.upload_requirements)


class Project(BaseModel):
    unit = pw.ForeignKeyField(Unit, backref="projects")
    student = pw.ForeignKeyField(User, backref="projects")
    started = pw.BooleanField(default=False)
    # simulated "today" for testing and backdating, None for the real date
    reference_date = pw.DateField(null=True)
    task_stats = pw.TextField(default=json.dumps({}))
    portfolio_production_date = pw.DateTimeField(null=True)


class TaskStatusInfo(BaseModel):
    # display metadata only: the state machine uses the TaskStatus enum
    key = pw.CharField(unique=True)
    name = pw.CharField()
    description = pw.TextField()


class Task(BaseModel):
    project = pw.ForeignKeyField(Project, backref="tasks")
    task_definition = pw.ForeignKeyField(TaskDefinition, backref="tasks")
    status = pw.CharField(default=TaskStatus.not_submitted.value)
    awaiting_signoff = pw.BooleanField(default=False)
    completion_date = pw.DateTimeField(null=True)
    max_pct_similar = pw.IntegerField(default=0)
    portfolio_evidence = pw.TextField(null=True)  # path to the task pdf
    include_in_portfolio = pw.BooleanField(default=True)
    file_uploaded_at = pw.DateTimeField(null=True)

    @property
    def task_status(self):
        return TaskStatus(self.status)


class TaskSubmission(BaseModel):
    task = pw.ForeignKeyField(Task, backref="submissions")
    submission_time = pw.DateTimeField(null=True)
    assessment_time = pw.DateTimeField(null=True)
    assessor = pw.ForeignKeyField(User, backref="assessments", null=True)
    outcome = pw.CharField(null=True)  # display name of the outcome status


class TaskEngagement(BaseModel):
    task = pw.ForeignKeyField(Task, backref="engagements")
    engagement_time = pw.DateTimeField()
    engagement = pw.CharField()  # display name of the status


class TaskComment(BaseModel):
    task = pw.ForeignKeyField(Task, backref="comments")
    user = pw.ForeignKeyField(User, backref="comments")
    comment = pw.TextField()
    created_at = pw.DateTimeField()


class PlagiarismMatchLink(BaseModel):
    task = pw.ForeignKeyField(Task, backref="plagiarism_links")
    other_task = pw.ForeignKeyField(Task, backref="plagiarism_links_from")
    pct = pw.IntegerField(default=0)
    dismissed = pw.BooleanField(default=False)
