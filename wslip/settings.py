# This file is part of wslip. See LICENSE file for license information.

import os

# Environment overrides for the file locations
CFG_ENV_NAME = "WSLIP_CONFIG"
HOSTS_ENV_NAME = "WSLIP_HOSTS"

# INI style file shared with the runtime scripts inside each instance
DEFAULT_CONFIG_NAME = ".wsl-iphandler-config"

if os.name == "nt":
    HOSTS_FILE = os.path.join(
        os.environ.get("SystemRoot", r"C:\Windows"),
        "System32",
        "drivers",
        "etc",
        "hosts",
    )
else:
    HOSTS_FILE = "/etc/hosts"

# What u get if no config is provided
CFG_BUILTIN = {
    "config_path": os.path.join("~", DEFAULT_CONFIG_NAME),
    "hosts_path": HOSTS_FILE,
    "backup": False,
    "log_level": "WARNING",
}

# Sections of the config file
NETWORK_SECTION = "network"
STATIC_IPS_SECTION = "static_ips"
IP_OFFSETS_SECTION = "ip_offsets"

# Keys of the network section
GATEWAY_KEY = "gateway_ip_address"
PREFIX_LENGTH_KEY = "prefix_length"
DNS_SERVERS_KEY = "dns_servers"
WINDOWS_HOST_NAME_KEY = "windows_host_name"
DYNAMIC_ADAPTERS_KEY = "dynamic_adapters"

DEFAULT_PREFIX_LENGTH = 24
DEFAULT_WINDOWS_HOST_NAME = "windows"

# Markers delimiting the hosts file lines this tool appends
HOSTS_REGION_BEGIN = "# wslip: begin managed entries"
HOSTS_REGION_END = "# wslip: end managed entries"

BACKUP_TIME_FORMAT = "%Y%m%d-%H%M%S"
