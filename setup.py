# This file is part of wslip. See LICENSE file for license information.

import os
import sys

import setuptools

# Python-path here is a little unpredictable as setup.py could be run
# from a directory other than the root of the repo, so ensure we can find
# our utils
sys.path.insert(0, os.path.dirname(os.path.realpath(__file__)))
# isort: off
from setup_utils import get_version, read_requires  # noqa: E402

# isort: on
del sys.path[0]

requirements = read_requires()

setuptools.setup(
    name="wslip",
    version=get_version(),
    description="Stable addresses for WSL instances across reboots",
    python_requires=">=3.8",
    packages=setuptools.find_packages(exclude=["tests.*", "tests"]),
    license="Dual-licensed under GPLv3 or Apache 2.0",
    install_requires=requirements,
    extras_require={"test": read_requires("test-requirements.txt")},
    entry_points={
        "console_scripts": [
            "wslip = wslip.cmd.main:main",
        ],
    },
)
