# This file is part of wslip. See LICENSE file for license information.

"""Pick addresses for static instances and offsets for dynamic ones.

Static instances get a fixed address inside the subnet of the host side
adapter. Dynamic instances get a small integer which the runtime script
adds to the network address of whatever subnet is active when the
instance starts.
"""

import ipaddress
import logging
from typing import Dict, Mapping, Optional

from wslip.exceptions import (
    AddressSpaceExhaustedError,
    ConflictError,
    InvalidAddressError,
    ParseError,
)
from wslip.net import Subnet

LOG = logging.getLogger(__name__)


def _taken_addresses(
    existing: Mapping[str, str], instance_name=None
) -> Dict[ipaddress.IPv4Address, str]:
    taken = {}
    for (owner, value) in existing.items():
        if owner == instance_name:
            continue
        try:
            address = ipaddress.IPv4Address(str(value).strip())
        except ValueError:
            LOG.warning(
                "Ignoring invalid static address '%s' of %s", value, owner
            )
            continue
        taken.setdefault(address, owner)
    return taken


def resolve_static(
    gateway,
    prefix_length,
    requested: Optional[str] = None,
    existing: Optional[Mapping[str, str]] = None,
    instance_name: Optional[str] = None,
) -> str:
    """Return the static address ``instance_name`` should use.

    :param requested: explicit address, always honoured when usable.
    :param existing: current instance name to address assignments.
    :raises InvalidAddressError: requested address is not a host address
        of the subnet or is the gateway.
    :raises ConflictError: requested address belongs to another instance.
    :raises AddressSpaceExhaustedError: no free address is left.
    """
    subnet = Subnet.from_gateway(gateway, prefix_length)
    existing = existing or {}
    taken = _taken_addresses(existing, instance_name)

    if requested:
        try:
            address = ipaddress.IPv4Address(str(requested).strip())
        except ValueError as e:
            raise InvalidAddressError(
                "Invalid address '%s': %s" % (requested, e)
            ) from e
        if not subnet.contains(address):
            raise InvalidAddressError(
                "%s is not a usable address in subnet %s" % (address, subnet)
            )
        if address == subnet.gateway:
            raise InvalidAddressError(
                "%s is the gateway address of subnet %s" % (address, subnet)
            )
        if address in taken:
            raise ConflictError(
                "%s is already assigned to %s" % (address, taken[address])
            )
        return str(address)

    if instance_name in existing:
        previous = existing[instance_name]
        try:
            address = ipaddress.IPv4Address(str(previous).strip())
        except ValueError:
            address = None
        if (
            address is not None
            and subnet.contains(address)
            and address != subnet.gateway
            and address not in taken
        ):
            LOG.debug("Keeping %s for %s", address, instance_name)
            return str(address)
        LOG.info(
            "Previous address '%s' of %s is unusable in %s, picking another",
            previous,
            instance_name,
            subnet,
        )

    # network + 1 is where the gateway usually lives
    candidate = subnet.network_address + 2
    while candidate < subnet.broadcast_address:
        if candidate != subnet.gateway and candidate not in taken:
            LOG.debug("Allocated %s from %s", candidate, subnet)
            return str(candidate)
        candidate += 1
    raise AddressSpaceExhaustedError(
        "No free address left in subnet %s" % subnet
    )


def parse_offset(value, owner=None) -> int:
    try:
        offset = int(str(value).strip())
    except ValueError:
        offset = 0
    if offset < 1:
        raise ParseError(
            "Offset '%s' of %s is not a positive integer" % (value, owner)
        )
    return offset


def resolve_offset(
    instance_name, existing_offsets: Optional[Mapping[str, str]] = None
) -> int:
    """Return the offset ``instance_name`` should use.

    An instance keeps the offset it already has; a new one gets the
    lowest positive integer nobody holds so released offsets get reused.
    """
    existing_offsets = existing_offsets or {}
    used = set()
    for (owner, value) in existing_offsets.items():
        offset = parse_offset(value, owner)
        if owner == instance_name:
            return offset
        used.add(offset)
    offset = 1
    while offset in used:
        offset += 1
    LOG.debug("Allocated offset %s for %s", offset, instance_name)
    return offset
