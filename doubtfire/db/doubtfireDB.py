# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

import logging

import peewee as pw
import pymysql

from doubtfire.db.tables import (
    User,
    Unit,
    UnitRole,
    TaskDefinition,
    Project,
    TaskStatusInfo,
    Task,
    TaskSubmission,
    TaskEngagement,
    TaskComment,
    PlagiarismMatchLink,
)
from doubtfire.db.tables import database_proxy
from doubtfire.task_status import status_info


log = logging.getLogger("DB")


class DoubtfireDB:
    """The Doubtfire database of units, projects, tasks and their history."""

    MySQL = None

    def __init__(
        self,
        dbfile_name="doubtfire.db",
        *,
        db_name=None,
        db_host=None,
        db_port=None,
        db_username=None,
        db_password=None,
    ):
        db = None
        if self.should_connect_to_mysql(
            db_name, db_host, db_port, db_username, db_password
        ):
            log.info(f"Connecting to MySQL database: {db_name}...")
            db = self.connect_mysql(db_name, db_host, db_port, db_username, db_password)
            log.info(f"Connected to MySQL database: {db_name}")
        else:
            log.info("Connecting to SQLite...")
            db = self.connect_sqlite(dbfile_name)
            log.info("Connected to SQLite.")

        self._db = db
        database_proxy.initialize(self._db)

        self._db.connect(reuse_if_open=True)
        self._db.create_tables(
            [
                User,
                Unit,
                UnitRole,
                TaskDefinition,
                Project,
                ##
                TaskStatusInfo,
                Task,
                ##
                TaskSubmission,
                TaskEngagement,
                TaskComment,
                PlagiarismMatchLink,
            ]
        )
        log.info("Database initialised.")
        self._seed_status_info()

    @classmethod
    def from_config(cls, config):
        """Connect to the database described by a config dict."""
        return cls(
            config["db_file"],
            db_name=config.get("db_name"),
            db_host=config.get("db_host"),
            db_port=config.get("db_port"),
            db_username=config.get("db_username"),
            db_password=config.get("db_password"),
        )

    def _seed_status_info(self):
        """Make sure every status has a row of display metadata."""
        with self._db.atomic():
            for status, info in status_info.items():
                row = TaskStatusInfo.get_or_none(key=status.value)
                if row is None:
                    TaskStatusInfo.create(key=status.value, **info)
                    log.debug("Added display info for status %s", status)

    def should_connect_to_mysql(
        self, db_name, db_host, db_port, db_username, db_password
    ):
        return True if db_name else False

    def connect_mysql(self, db_name, db_host, db_port, db_username, db_password):
        mysql_connection = pymysql.connect(
            host=db_host,
            port=db_port,
            user=db_username,
            password=db_password,
        )

        mysql_connection.cursor().execute(f"CREATE DATABASE IF NOT EXISTS {db_name};")
        mysql_connection.close()

        self.MySQL = mysql_connection

        return pw.MySQLDatabase(
            db_name,
            host=db_host,
            port=db_port,
            user=db_username,
            password=db_password,
        )

    def connect_sqlite(self, dbfile_name):
        db = pw.SqliteDatabase(None)
        # can't handle pathlib?
        db.init(str(dbfile_name))

        return db

    def atomic(self):
        """A transaction: everything inside is committed together or not at all."""
        return self._db.atomic()

    def close(self):
        if not self._db.is_closed():
            self._db.close()

    from doubtfire.db.db_users import (
        create_user,
        get_user,
        create_unit,
        employ_staff,
        enrol_student,
        add_task_definition,
        role_for,
        tutors_of,
        students_of,
    )

    from doubtfire.db.db_project import (
        mark_started,
        reference_date,
        set_reference_date,
        recompute_stats,
        get_task_stats,
    )

    from doubtfire.db.db_task import (
        get_task,
        latest_submission,
        get_submissions,
        get_engagements,
        delete_task,
        set_portfolio_evidence,
        has_pdf,
        processing_pdf,
        task_is_overdue,
        task_is_long_overdue,
        task_is_currently_due,
        task_days_overdue,
        tasks_ready_to_mark,
        status_distribution,
    )

    from doubtfire.db.db_comment import (
        add_comment,
        last_comment_by,
        get_comments,
        delete_comment,
    )

    from doubtfire.db.db_plagiarism import (
        create_plagiarism_link,
        get_plagiarism_link,
        remove_plagiarism_link,
        update_max_pct_similar,
    )
