import os
from typing import List

TOPDIR = os.path.dirname(os.path.realpath(__file__))


def is_f(p: str) -> bool:
    return os.path.isfile(p)


def version_to_pep440(version: str) -> str:
    # a git describe style version like 0.4.0-15-g7f97aee24 is invalid
    # under PEP 440. If we replace the first - with a + that should give
    # us a valid version.
    return version.replace("-", "+", 1)


def get_version() -> str:
    scope: dict = {}
    with open(os.path.join(TOPDIR, "wslip", "version.py")) as fp:
        exec(fp.read(), scope)  # nosec B102
    return version_to_pep440(scope["version_string"]())


def read_requires(fname: str = "requirements.txt") -> List[str]:
    path = os.path.join(TOPDIR, fname)
    if not is_f(path):
        return []
    with open(path) as fp:
        lines = [line.split("#", 1)[0].strip() for line in fp]
    return [line for line in lines if line and not line.startswith("-")]
