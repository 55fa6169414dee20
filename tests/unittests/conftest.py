# This file is part of wslip. See LICENSE file for license information.

import pytest

from tests.unittests.helpers import BASE_CONFIG, BASE_HOSTS
from wslip.config import ConfigStore
from wslip.hosts import HostsStore
from wslip.reconciler import Reconciler


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "wsl-iphandler-config"


@pytest.fixture
def hosts_path(tmp_path):
    path = tmp_path / "hosts"
    path.write_text(BASE_HOSTS)
    return path


@pytest.fixture
def network_config(config_path):
    config_path.write_text(BASE_CONFIG)
    return config_path


@pytest.fixture
def reconciler(network_config, hosts_path):
    return Reconciler(
        ConfigStore.from_path(network_config), HostsStore(hosts_path)
    )
