"""Global conftest.py

This conftest is used for unit tests in ``tests/unittests/``.

Any imports that are performed at the top-level here must be installed wherever
any of these tests run: that is to say, they must be listed in
``test-requirements.txt``.
"""

import pytest

from wslip import settings


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Never let a developer's own overrides leak into tests."""
    monkeypatch.delenv(settings.CFG_ENV_NAME, raising=False)
    monkeypatch.delenv(settings.HOSTS_ENV_NAME, raising=False)
