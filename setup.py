# SPDX-License-Identifier: FSFAP
# Copyright (C) 2013-2026 The Doubtfire Developers
#
# Copying and distribution of this file, with or without modification,
# are permitted in any medium without royalty provided the copyright
# notice and this notice are preserved.  This file is offered as-is,
# without any warranty.

import os
from setuptools import setup, find_packages

# This directory
dir_setup = os.path.dirname(os.path.realpath(__file__))

with open(os.path.join(dir_setup, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

with open(os.path.join(dir_setup, "doubtfire", "version.py")) as f:
    # Defines __version__
    exec(f.read())

install_requires = [
    "arrow>=1.1.1",
    "peewee>=3.13.3",
    "PyMySQL>=1.0.2",
    "pymupdf>=1.21.0",
    "Pillow>=7.0.0",
    "Pygments>=2.10",
    "python-magic>=0.4.20",
    "tqdm",
    "weasyprint>=52.5",
    "zipfly>=6.0.3",
    'tomli>=2.0.1 ; python_version<"3.11"',  # until we drop 3.10
]

# Non-Python deps
#   - pdftk
#   - ghostscript
#   - imagemagick
#   - libmagic


setup(
    name="doubtfire",
    version=__version__,  # noqa: F821
    description="Doubtfire task tracking and portfolio building",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="The Doubtfire Developers",
    license="AGPLv3+",
    python_requires=">=3.9",
    packages=find_packages(include=["doubtfire", "doubtfire.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GNU Affero General Public License v3 or later (AGPLv3+)",
        "Development Status :: 3 - Alpha",
        "Operating System :: OS Independent",
        "Topic :: Education",
    ],
    entry_points={
        "console_scripts": [
            "doubtfire-portfolio=doubtfire.portfolio.__main__:main",
        ],
    },
    package_data={"doubtfire": ["doubtfireConfig.toml"]},
    install_requires=install_requires,
    extras_require={"test": ["pytest"]},
)
