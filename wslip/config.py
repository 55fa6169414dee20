# This file is part of wslip. See LICENSE file for license information.

"""Persistent settings and per instance assignments.

The file is shared with the scripts that run inside each instance, so any
section or key this module does not know about is left alone.
"""

import logging
import os
from typing import Dict, List, NamedTuple, Optional

import configobj

from wslip import atomic_helper, net, settings, util
from wslip.exceptions import (
    DuplicateValueError,
    InvalidAddressError,
    ParseError,
)
from wslip.parsers.wsl_conf import WslConf

LOG = logging.getLogger(__name__)


class ConfigStore:
    def __init__(self, path):
        self.path = os.fspath(path)
        self._doc = WslConf()
        self._encoding = "utf-8"
        self._newline = "\n"
        self._modified = False

    @classmethod
    def from_path(cls, path) -> "ConfigStore":
        store = cls(path)
        store.load()
        return store

    @property
    def modified(self) -> bool:
        return self._modified

    def load(self):
        text_file = util.load_text_file(self.path, quiet=True)
        self._doc = WslConf.parse(text_file.content, path=self.path)
        self._encoding = text_file.encoding
        self._newline = text_file.newline
        self._modified = False
        LOG.debug(
            "Loaded %s sections from %s", len(self._doc.sections), self.path
        )

    def dumps(self) -> str:
        lines = self._doc.lines()
        if not lines:
            return ""
        return self._newline.join(lines) + self._newline

    def save(self, backup=False) -> bool:
        if not self._modified:
            LOG.debug("No changes to %s, not writing it", self.path)
            return False
        backup_name = atomic_helper.write_file(
            self.path, self.dumps(), encoding=self._encoding, backup=backup
        )
        if backup_name:
            LOG.info("Saved previous %s as %s", self.path, backup_name)
        self._modified = False
        return True

    def snapshot(self):
        return (self.dumps(), self._modified)

    def restore(self, snapshot):
        (text, modified) = snapshot
        self._doc = WslConf.parse(text, path=self.path)
        self._modified = modified

    def _section(self, section) -> Optional[configobj.Section]:
        found = self._doc.get(section)
        if isinstance(found, configobj.Section):
            return found
        return None

    def get(self, section, key, default=None):
        found = self._section(section)
        if found is None or key not in found.scalars:
            return default
        return found[key]

    def items(self, section) -> Dict[str, str]:
        found = self._section(section)
        if found is None:
            return {}
        return {key: found[key] for key in found.scalars}

    def section_count(self, section) -> int:
        found = self._section(section)
        if found is None:
            return 0
        return len(found.scalars)

    def set(self, section, key, value, unique=False) -> bool:
        """Store value under section/key.

        :param unique: refuse a value already stored under another key
            of the same section.
        :raises DuplicateValueError: when unique is violated.
        :return: whether the stored value changed.
        """
        value = str(value)
        found = self._section(section)
        if found is not None and unique:
            for other in found.scalars:
                if other != key and found[other] == value:
                    raise DuplicateValueError(section, key, value, other)
        if found is None:
            if section in self._doc:
                raise ParseError(
                    "'%s' is a plain value, not a section" % section,
                    self.path,
                )
            self._doc[section] = {}
            found = self._doc[section]
        elif key in found.scalars and found[key] == value:
            return False
        LOG.debug("Setting [%s] %s = %s", section, key, value)
        found[key] = value
        self._modified = True
        return True

    def _detach(self, owner, name):
        """Delete owner[name], keeping the comment lines written above it.

        They move onto the entry that now follows, or to the end of the
        file when nothing does.
        """
        moved = list(owner.comments.get(name) or [])
        position = (owner.scalars + owner.sections).index(name)
        del owner[name]
        if not any(line.strip() for line in moved):
            return
        while True:
            following = (owner.scalars + owner.sections)[position:]
            if following:
                target = following[0]
                owner.comments[target] = moved + owner.comments[target]
                return
            if owner is self._doc:
                self._doc.final_comment = moved + self._doc.final_comment
                return
            parent = owner.parent
            position = (parent.scalars + parent.sections).index(owner.name)
            (owner, position) = (parent, position + 1)

    def remove(self, section, key) -> bool:
        found = self._section(section)
        if found is None or key not in found.scalars:
            return False
        LOG.debug("Removing [%s] %s", section, key)
        self._detach(found, key)
        if not found.scalars and not found.sections:
            self._detach(self._doc, section)
        self._modified = True
        return True

    def remove_section(self, section) -> bool:
        found = self._section(section)
        if found is None:
            return False
        LOG.debug("Removing section [%s]", section)
        for key in list(found.scalars):
            self._detach(found, key)
        self._detach(self._doc, section)
        self._modified = True
        return True


class NetworkConfig(NamedTuple):
    gateway: Optional[str]
    prefix_length: int
    dns_servers: List[str]
    windows_host_name: str
    dynamic_adapters: List[str]


def _split_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [item.strip() for item in value if item and item.strip()]


def _get(store, key, default=None):
    return store.get(settings.NETWORK_SECTION, key, default)


def get_gateway(store, gateway=None) -> Optional[str]:
    if gateway:
        return str(gateway).strip()
    return _get(store, settings.GATEWAY_KEY) or None


def get_prefix_length(store, prefix_length=None) -> int:
    if prefix_length is None:
        prefix_length = _get(
            store, settings.PREFIX_LENGTH_KEY, settings.DEFAULT_PREFIX_LENGTH
        )
    try:
        return int(prefix_length)
    except (TypeError, ValueError) as e:
        raise ParseError(
            "Invalid prefix length '%s'" % prefix_length, store.path
        ) from e


def get_dns_servers(store, dns_servers=None, gateway=None) -> List[str]:
    found = _split_list(dns_servers) or _split_list(
        _get(store, settings.DNS_SERVERS_KEY)
    )
    if found:
        return found
    gateway = get_gateway(store, gateway)
    return [gateway] if gateway else []


def get_windows_host_name(store, windows_host_name=None) -> str:
    if windows_host_name:
        return windows_host_name
    return (
        _get(store, settings.WINDOWS_HOST_NAME_KEY)
        or settings.DEFAULT_WINDOWS_HOST_NAME
    )


def get_dynamic_adapters(store, dynamic_adapters=None) -> List[str]:
    return _split_list(dynamic_adapters) or _split_list(
        _get(store, settings.DYNAMIC_ADAPTERS_KEY)
    )


def read_network_config(
    store,
    gateway=None,
    prefix_length=None,
    dns_servers=None,
    windows_host_name=None,
    dynamic_adapters=None,
) -> NetworkConfig:
    """Settings handed to the adapter, scheduler and profile integrators."""
    gateway = get_gateway(store, gateway)
    return NetworkConfig(
        gateway=gateway,
        prefix_length=get_prefix_length(store, prefix_length),
        dns_servers=get_dns_servers(store, dns_servers, gateway),
        windows_host_name=get_windows_host_name(store, windows_host_name),
        dynamic_adapters=get_dynamic_adapters(store, dynamic_adapters),
    )


def write_network_config(
    store,
    gateway=None,
    prefix_length=None,
    dns_servers=None,
    windows_host_name=None,
    dynamic_adapters=None,
) -> bool:
    """Persist the explicitly given network settings.

    Values left as None keep whatever is stored. The gateway and prefix
    length are validated together before anything is written.
    """
    if gateway is not None or prefix_length is not None:
        resolved = get_gateway(store, gateway)
        length = get_prefix_length(store, prefix_length)
        if resolved is not None:
            gateway = str(net.Subnet.from_gateway(resolved, length).gateway)
        prefix_length = length if prefix_length is not None else None
    dns = _split_list(dns_servers)
    for server in dns:
        if not net.is_ip_address(server):
            raise InvalidAddressError("Invalid DNS server '%s'" % server)

    values = {
        settings.GATEWAY_KEY: gateway,
        settings.PREFIX_LENGTH_KEY: prefix_length,
        settings.DNS_SERVERS_KEY: ", ".join(dns) if dns else None,
        settings.WINDOWS_HOST_NAME_KEY: windows_host_name,
        settings.DYNAMIC_ADAPTERS_KEY: (
            ", ".join(_split_list(dynamic_adapters))
            if dynamic_adapters
            else None
        ),
    }
    changed = False
    for (key, value) in values.items():
        if value is not None:
            changed |= store.set(settings.NETWORK_SECTION, key, value)
    return changed
