# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Reading and writing the Doubtfire configuration file."""

from __future__ import annotations

from importlib import resources
import logging
from pathlib import Path
import sys
from typing import Any

if sys.version_info < (3, 11):
    import tomli as tomllib
else:
    import tomllib

import doubtfire
from doubtfire.doubtfire_exceptions import DoubtfireConfigError


log = logging.getLogger("config")

config_filename = "doubtfireConfig.toml"

default_config: dict[str, Any] = {
    "student_work_dir": "student_work",
    "LogLevel": "info",
    "db_file": "doubtfire.db",
    "db_name": None,
    "db_host": "127.0.0.1",
    "db_port": 3306,
    "db_username": None,
    "db_password": None,
    "compress_threshold_bytes": 1200000,
    "pdf_check_timeout": 30,
    "compress_timeout": 120,
    "aggregate_timeout": 180,
    "render_timeout": 120,
    "image_max_dimension": 1000,
    "image_quality": 75,
    "pdftk": "pdftk",
    "ghostscript": "gs",
    "imagemagick": "convert",
}

_positive_keys = (
    "compress_threshold_bytes",
    "pdf_check_timeout",
    "compress_timeout",
    "aggregate_timeout",
    "render_timeout",
    "image_max_dimension",
)


def create_config(dur=Path("."), *, student_work_dir=None, db_name=None) -> Path:
    """Create a default configuration file.

    Args:
        dur (pathlib.Path/str): where to put the file.

    Keyword Args:
        student_work_dir (str/None): where to keep student work.
        db_name (str/None): the name of a MySQL database, omitted if `None`.

    Returns:
        The path to the new file.

    Raises:
        FileExistsError: file is already there.

    The template is manipulated with find-and-replace so as to preserve
    its comments.
    """
    cfg = Path(dur) / config_filename
    if cfg.exists():
        raise FileExistsError("Config already exists in {}".format(cfg))
    template = (resources.files(doubtfire) / config_filename).read_text()
    if student_work_dir:
        template = template.replace(
            'student_work_dir = "student_work"',
            f'student_work_dir = "{student_work_dir}"',
        )
    if db_name:
        template = template.replace("#db_name =", f'db_name = "{db_name}"')
    with open(cfg, "w") as fh:
        fh.write(template)
    return cfg


def load_config(path=None) -> dict[str, Any]:
    """Read the config file, filling in defaults for anything missing.

    Args:
        path (pathlib.Path/str/None): a config file, or a directory
            containing one.  If None, look in the current directory.

    Returns:
        A dict of settings.

    Raises:
        DoubtfireConfigError: a limit or size is not a positive number.
    """
    path = Path(path) if path else Path(".")
    if path.is_dir():
        path = path / config_filename
    config = default_config.copy()
    try:
        with open(path, "rb") as f:
            config.update(tomllib.load(f))
        log.debug("Config loaded from %s: %s", path, config)
    except FileNotFoundError:
        log.warning("Cannot find %s, using defaults", path)
    for k in _positive_keys:
        v = config[k]
        if isinstance(v, bool) or not isinstance(v, (int, float)) or v <= 0:
            raise DoubtfireConfigError(f'Config "{k}" must be positive, not "{v}"')
    if not 0 < config["image_quality"] <= 100:
        raise DoubtfireConfigError(
            f'Config "image_quality" must be in 1-100, not "{config["image_quality"]}"'
        )
    return config


def configure_logging(config, *, logfile=None, logconsole=True) -> None:
    """Send log messages to a file and/or the console at the configured level."""
    # 5 is to keep debug/info lined up
    fmtstr = "%(asctime)s %(levelname)5s:%(name)s\t%(message)s"
    datefmt = "%b%d %H:%M:%S %Z"
    root = logging.getLogger()
    if logfile:
        h = logging.FileHandler(logfile)
        h.setFormatter(logging.Formatter(fmtstr, datefmt=datefmt))
        root.addHandler(h)
    if logconsole:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(fmtstr, datefmt=datefmt))
        root.addHandler(h)
    root.setLevel(config["LogLevel"].upper())
