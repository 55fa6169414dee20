# This file is part of wslip. See LICENSE file for license information.

import ipaddress
import logging
from typing import Callable, NamedTuple

from wslip.exceptions import InvalidAddressError

LOG = logging.getLogger(__name__)

# Smallest subnet with room for the gateway plus one instance is a /30
MIN_PREFIX_LENGTH = 1
MAX_PREFIX_LENGTH = 30


def ip_address(address):
    return ipaddress.ip_address(str(address).strip())


def maybe_get_address(convert_to_address: Callable, address: str, **kwargs):
    """Return convert_to_address(address), or False when it is rejected."""
    try:
        return convert_to_address(address, **kwargs)
    except ValueError:
        return False


def is_ip_address(address: str) -> bool:
    """Whether address is an IPv4 or IPv6 address."""
    return bool(maybe_get_address(ipaddress.ip_address, address))


class Subnet(NamedTuple):
    network_address: ipaddress.IPv4Address
    prefix_length: int
    gateway: ipaddress.IPv4Address
    broadcast_address: ipaddress.IPv4Address

    @classmethod
    def from_gateway(cls, gateway, prefix_length) -> "Subnet":
        """Derive the subnet the gateway address lives in.

        :raises InvalidAddressError: when the gateway is not an IPv4 address,
            the prefix length leaves no room for instances, or the gateway
            is the network or broadcast address of its own subnet.
        """
        try:
            prefix_length = int(prefix_length)
            gateway_ip = ipaddress.IPv4Address(str(gateway).strip())
        except (TypeError, ValueError) as e:
            raise InvalidAddressError(
                "Invalid gateway '%s/%s': %s" % (gateway, prefix_length, e)
            ) from e
        if not MIN_PREFIX_LENGTH <= prefix_length <= MAX_PREFIX_LENGTH:
            raise InvalidAddressError(
                "Prefix length %s is outside %s..%s"
                % (prefix_length, MIN_PREFIX_LENGTH, MAX_PREFIX_LENGTH)
            )
        network = ipaddress.IPv4Network(
            (gateway_ip, prefix_length), strict=False
        )
        if gateway_ip in (network.network_address, network.broadcast_address):
            raise InvalidAddressError(
                "Gateway %s cannot be the network or broadcast address of %s"
                % (gateway_ip, network)
            )
        return cls(
            network.network_address,
            prefix_length,
            gateway_ip,
            network.broadcast_address,
        )

    @property
    def network(self) -> ipaddress.IPv4Network:
        return ipaddress.IPv4Network(
            (self.network_address, self.prefix_length)
        )

    def contains(self, address) -> bool:
        """Whether address is a host address of this subnet."""
        if not isinstance(address, ipaddress.IPv4Address):
            address = ipaddress.IPv4Address(str(address).strip())
        return self.network_address < address < self.broadcast_address

    def __str__(self):
        return str(self.network)


def is_within_subnet(address, gateway, prefix_length) -> bool:
    """Returns a bool indicating if ``address`` is a usable host address.

    The network and broadcast addresses are not usable. Malformed input
    is reported as not within the subnet.
    """
    try:
        subnet = Subnet.from_gateway(gateway, prefix_length)
        return subnet.contains(address)
    except (InvalidAddressError, ValueError):
        return False
