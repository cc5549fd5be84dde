#!/usr/bin/env python3

# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2013-2026 The Doubtfire Developers

"""Doubtfire script for checking uploads and building PDFs.

## Overview

  1. Use the `init` command to write a config file, then edit it.

  2. Use `check` to see if a file would be accepted as a document,
     code or image, and `pages` to count the pages of a PDF.

  3. Use `convert` to turn a directory of staged files (named like
     `000.code.java`) into one PDF.

  4. Use `process` to build the PDFs of every task with waiting
     uploads, and `build-all` to compile every portfolio.
"""

__copyright__ = "Copyright (C) 2013-2026 The Doubtfire Developers"
__credits__ = "The Doubtfire Developers"
__license__ = "AGPL-3.0-or-later"

import argparse
from pathlib import Path
import sys
import tempfile

from tqdm import tqdm

from doubtfire import __version__
from doubtfire.config import configure_logging, create_config, load_config
from doubtfire.db import DoubtfireDB
from doubtfire.db.tables import Project, Unit
from doubtfire.doubtfire_exceptions import DoubtfireException
from doubtfire.files import FileHelper, pdf_page_count
from doubtfire.portfolio import compile_portfolio, process_pending


def get_parser():
    parser = argparse.ArgumentParser(
        description=__doc__.split("\n")[0],
        epilog="\n".join(__doc__.split("\n")[1:]),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s " + __version__
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        help="""
            Config file, or a directory containing "doubtfireConfig.toml".
            Defaults to the current directory.
        """,
    )
    parser.add_argument(
        "--logfile",
        metavar="FILE",
        help="Also write log messages to this file.",
    )

    sub = parser.add_subparsers(dest="command")

    spInit = sub.add_parser(
        "init",
        help="Write a config file",
        description="Write a default config file for you to edit.",
    )
    spInit.add_argument(
        "dir",
        nargs="?",
        default=".",
        help="Where to put the config file, default current directory.",
    )
    spInit.add_argument(
        "--student-work-dir",
        metavar="DIR",
        help="Where student uploads and PDFs are kept.",
    )
    spInit.add_argument(
        "--db-name",
        metavar="NAME",
        help="Use this MySQL database instead of SQLite.",
    )

    spCheck = sub.add_parser(
        "check",
        help="Would a file be accepted?",
        description="Check a file is really of the kind it claims to be.",
    )
    spCheck.add_argument("file", help="The file to check.")
    spCheck.add_argument(
        "--kind",
        required=True,
        choices=("document", "code", "image"),
        help="What the file is supposed to be.",
    )

    spConvert = sub.add_parser(
        "convert",
        help="Convert staged files to one PDF",
        description="""
            Convert each file in a directory of staged files to PDF and
            join them, in index order, into one PDF.
        """,
    )
    spConvert.add_argument("dir", help="Directory of files like 000.code.java.")
    spConvert.add_argument("out", help="The PDF file to write.")

    spPages = sub.add_parser(
        "pages",
        help="Count the pages of a PDF",
        description="Print how many pages a PDF file has.",
    )
    spPages.add_argument("file", help="A PDF file.")

    sub.add_parser(
        "process",
        help="Build PDFs for waiting uploads",
        description="""
            Convert the uploads of every task waiting in the "new" area.
            Tasks that fail are left there for another try.
        """,
    )

    spBuild = sub.add_parser(
        "build-all",
        help="Compile every portfolio",
        description="Compile the portfolio PDF of every project.",
    )
    spBuild.add_argument(
        "--unit",
        metavar="CODE",
        help="Only projects in this unit.",
    )
    return parser


def convert_dir(fh, from_dir, out) -> bool:
    with tempfile.TemporaryDirectory() as tmpdir:
        result = fh.convert_files_to_pdf(from_dir, tmpdir)
        if result.failed:
            print(f"Could not convert: {result.failed}")
        if not result.pdf_paths:
            return False
        return fh.aggregate(result.pdf_paths, out)


def build_all(db, fh, unit_code=None) -> int:
    """Compile every portfolio, returning how many failed."""
    query = Project.select().join(Unit)
    if unit_code:
        query = query.where(Unit.code == unit_code)
    failures = 0
    for project in tqdm(list(query), desc="Portfolios"):
        try:
            compile_portfolio(db, fh, project)
        except DoubtfireException as e:
            tqdm.write(f"Project {project.id} ({project.student.username}): {e}")
            failures += 1
    return failures


def main(argv=None):
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        cfg = create_config(
            args.dir, student_work_dir=args.student_work_dir, db_name=args.db_name
        )
        print(f"Wrote {cfg}: please check and edit it")
        return

    config = load_config(args.config)
    configure_logging(config, logfile=args.logfile, logconsole=True)
    fh = FileHelper(config)

    if args.command == "check":
        if fh.accept_file(Path(args.file), Path(args.file).name, args.kind):
            print(f"{args.file}: accepted as {args.kind}")
        else:
            print(f"{args.file}: is not a valid {args.kind} file")
            sys.exit(1)
    elif args.command == "convert":
        if not convert_dir(fh, args.dir, args.out):
            sys.exit(f"Could not make {args.out}")
        print(f"Wrote {args.out}")
    elif args.command == "pages":
        print(pdf_page_count(args.file))
    elif args.command == "process":
        db = DoubtfireDB.from_config(config)
        good, bad = process_pending(db, fh)
        print(f"Processed {len(good)} task(s), {len(bad)} failed")
        if bad:
            sys.exit(1)
    elif args.command == "build-all":
        db = DoubtfireDB.from_config(config)
        if build_all(db, fh, args.unit):
            sys.exit(1)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
