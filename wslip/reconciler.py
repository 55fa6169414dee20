# This file is part of wslip. See LICENSE file for license information.

"""Assign and release instance addresses across the config and hosts files.

Every operation first mutates both documents in memory. If any step fails
the documents are put back the way they were, so a failed operation never
leaves anything to be written. ``save`` flushes whatever changed.
"""

import contextlib
import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Union

from wslip import config, net, settings
from wslip.config import ConfigStore
from wslip.exceptions import ConflictError, InvalidAddressError
from wslip.hosts import HostsStore
from wslip.net import allocator

LOG = logging.getLogger(__name__)

_HOSTNAME_INVALID = re.compile(r"[^a-z0-9.-]+")


class Mode(enum.Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class StaticRequest:
    address: Optional[str] = None
    gateway: Optional[str] = None
    prefix_length: Optional[int] = None


@dataclass(frozen=True)
class DynamicRequest:
    pass


AssignmentRequest = Union[StaticRequest, DynamicRequest]


@dataclass
class Assignment:
    instance_name: str
    mode: Mode
    hostname: str
    windows_host_name: str
    address: Optional[str] = None
    offset: Optional[int] = None
    changed: bool = False

    @property
    def value(self) -> str:
        if self.mode is Mode.STATIC:
            return str(self.address)
        return str(self.offset)

    def installer_args(self) -> List[str]:
        """Positional arguments for the script run inside the instance."""
        return [self.value, self.hostname, self.windows_host_name]

    def as_dict(self) -> Dict:
        data = {
            "instance": self.instance_name,
            "mode": self.mode.value,
            "hostname": self.hostname,
            "windows_host_name": self.windows_host_name,
        }
        if self.mode is Mode.STATIC:
            data["address"] = self.address
        else:
            data["offset"] = self.offset
        return data


class ReleaseResult(NamedTuple):
    changed: bool
    # No static address depends on the network section any more
    clear_network: bool


def resolve_hostname(instance_name) -> str:
    hostname = _HOSTNAME_INVALID.sub("-", instance_name.strip().lower())
    hostname = hostname.strip("-.")
    if not hostname:
        raise ValueError(
            "Cannot derive a hostname from instance name '%s'" % instance_name
        )
    return hostname


def _check_instance_name(instance_name):
    if (
        not instance_name
        or instance_name != instance_name.strip()
        or any(c in instance_name for c in "[]=#\r\n")
    ):
        raise ValueError("Invalid instance name '%s'" % instance_name)


class Reconciler:
    def __init__(self, config_store: ConfigStore, hosts_store: HostsStore):
        self.config = config_store
        self.hosts = hosts_store

    @property
    def modified(self) -> bool:
        return self.config.modified or self.hosts.modified

    @contextlib.contextmanager
    def _transaction(self, description):
        config_state = self.config.snapshot()
        hosts_state = self.hosts.snapshot()
        try:
            yield
        except Exception:
            LOG.debug("Reverting in-memory changes: %s failed", description)
            self.config.restore(config_state)
            self.hosts.restore(hosts_state)
            raise

    def _hostname_holders(self, hostname, instance_name) -> List[str]:
        """Other static instances whose names map to the same hostname."""
        holders = []
        for name in self.config.items(settings.STATIC_IPS_SECTION):
            if name == instance_name:
                continue
            try:
                if resolve_hostname(name) == hostname:
                    holders.append(name)
            except ValueError:
                LOG.debug("No hostname for static instance '%s'", name)
        return sorted(holders)

    def assign(self, instance_name, request: AssignmentRequest) -> Assignment:
        if isinstance(request, StaticRequest):
            return self.assign_static(
                instance_name,
                address=request.address,
                gateway=request.gateway,
                prefix_length=request.prefix_length,
            )
        if isinstance(request, DynamicRequest):
            return self.assign_dynamic(instance_name)
        raise TypeError("Unknown assignment request %r" % (request,))

    def _subnet(self, instance_name, gateway, prefix_length) -> net.Subnet:
        """Subnet for a static assignment, refusing to move a network
        other static instances still live in."""
        resolved = config.get_gateway(self.config, gateway)
        if resolved is None:
            raise InvalidAddressError(
                "No gateway address configured; one must be given"
            )
        subnet = net.Subnet.from_gateway(
            resolved, config.get_prefix_length(self.config, prefix_length)
        )
        stored = config.get_gateway(self.config)
        if stored is None:
            return subnet
        holders = sorted(
            name
            for name in self.config.items(settings.STATIC_IPS_SECTION)
            if name != instance_name
        )
        if not holders:
            return subnet
        current = net.Subnet.from_gateway(
            stored, config.get_prefix_length(self.config)
        )
        if current != subnet:
            raise ConflictError(
                "Cannot move gateway from %s/%s to %s/%s while static"
                " addresses are assigned to: %s"
                % (
                    current.gateway,
                    current.prefix_length,
                    subnet.gateway,
                    subnet.prefix_length,
                    ", ".join(holders),
                )
            )
        return current

    def assign_static(
        self, instance_name, address=None, gateway=None, prefix_length=None
    ) -> Assignment:
        _check_instance_name(instance_name)
        with self._transaction("static assignment of %s" % instance_name):
            subnet = self._subnet(instance_name, gateway, prefix_length)
            address = allocator.resolve_static(
                subnet.gateway,
                subnet.prefix_length,
                requested=address,
                existing=self.config.items(settings.STATIC_IPS_SECTION),
                instance_name=instance_name,
            )
            hostname = resolve_hostname(instance_name)
            holders = self._hostname_holders(hostname, instance_name)
            if holders:
                raise ConflictError(
                    "Hostname '%s' is already used by: %s"
                    % (hostname, ", ".join(holders))
                )
            changed = config.write_network_config(
                self.config,
                gateway=str(subnet.gateway),
                prefix_length=subnet.prefix_length,
            )
            changed |= self.config.set(
                settings.STATIC_IPS_SECTION,
                instance_name,
                address,
                unique=True,
            )
            changed |= self.config.remove(
                settings.IP_OFFSETS_SECTION, instance_name
            )
            changed |= self.hosts.upsert(address, hostname)
        LOG.info("%s uses static address %s", instance_name, address)
        return Assignment(
            instance_name,
            Mode.STATIC,
            hostname,
            config.get_windows_host_name(self.config),
            address=address,
            changed=changed,
        )

    def assign_dynamic(self, instance_name) -> Assignment:
        _check_instance_name(instance_name)
        with self._transaction("dynamic assignment of %s" % instance_name):
            offset = allocator.resolve_offset(
                instance_name,
                self.config.items(settings.IP_OFFSETS_SECTION),
            )
            hostname = resolve_hostname(instance_name)
            changed = self.config.set(
                settings.IP_OFFSETS_SECTION, instance_name, offset, unique=True
            )
            if self.config.remove(settings.STATIC_IPS_SECTION, instance_name):
                changed = True
                if not self._hostname_holders(hostname, instance_name):
                    self.hosts.remove(hostname)
        LOG.info("%s uses address offset %s", instance_name, offset)
        return Assignment(
            instance_name,
            Mode.DYNAMIC,
            hostname,
            config.get_windows_host_name(self.config),
            offset=offset,
            changed=changed,
        )

    def release(self, instance_name) -> ReleaseResult:
        hostname = resolve_hostname(instance_name)
        with self._transaction("release of %s" % instance_name):
            changed = self.config.remove(
                settings.STATIC_IPS_SECTION, instance_name
            )
            changed |= self.config.remove(
                settings.IP_OFFSETS_SECTION, instance_name
            )
            if not self._hostname_holders(hostname, instance_name):
                changed |= self.hosts.remove(hostname)
        clear_network = (
            self.config.section_count(settings.STATIC_IPS_SECTION) == 0
        )
        if changed:
            LOG.info("Released %s", instance_name)
        else:
            LOG.debug("Nothing to release for %s", instance_name)
        return ReleaseResult(changed, clear_network)

    def clear_network(self) -> bool:
        holders = sorted(self.config.items(settings.STATIC_IPS_SECTION))
        if holders:
            raise ConflictError(
                "Network settings are still used by: %s" % ", ".join(holders)
            )
        return self.config.remove_section(settings.NETWORK_SECTION)

    def get_assignment(self, instance_name) -> Optional[Assignment]:
        windows_host_name = config.get_windows_host_name(self.config)
        address = self.config.get(settings.STATIC_IPS_SECTION, instance_name)
        if address is not None:
            return Assignment(
                instance_name,
                Mode.STATIC,
                resolve_hostname(instance_name),
                windows_host_name,
                address=address,
            )
        offset = self.config.get(settings.IP_OFFSETS_SECTION, instance_name)
        if offset is not None:
            return Assignment(
                instance_name,
                Mode.DYNAMIC,
                resolve_hostname(instance_name),
                windows_host_name,
                offset=allocator.parse_offset(offset, instance_name),
            )
        return None

    def assignments(self) -> List[Assignment]:
        names = list(self.config.items(settings.STATIC_IPS_SECTION))
        for name in self.config.items(settings.IP_OFFSETS_SECTION):
            if name not in names:
                names.append(name)
        return [self.get_assignment(name) for name in names]

    def save(self, backup=False) -> bool:
        config_saved = self.config.save(backup=backup)
        hosts_saved = self.hosts.save(backup=backup)
        return config_saved or hosts_saved
