# This file is part of wslip. See LICENSE file for license information.

import ipaddress

import pytest

from wslip import net
from wslip.exceptions import InvalidAddressError


class TestSubnet:
    def test_from_gateway(self):
        subnet = net.Subnet.from_gateway("172.16.0.1", 24)
        assert ipaddress.IPv4Address("172.16.0.0") == subnet.network_address
        assert ipaddress.IPv4Address("172.16.0.255") == (
            subnet.broadcast_address
        )
        assert ipaddress.IPv4Address("172.16.0.1") == subnet.gateway
        assert 24 == subnet.prefix_length
        assert "172.16.0.0/24" == str(subnet)

    def test_gateway_need_not_be_first_address(self):
        subnet = net.Subnet.from_gateway("192.168.50.77", "20")
        assert "192.168.48.0/20" == str(subnet)
        assert 20 == subnet.prefix_length

    @pytest.mark.parametrize(
        "gateway,prefix_length",
        [
            pytest.param("172.16.0.0", 24, id="network-address"),
            pytest.param("172.16.0.255", 24, id="broadcast-address"),
            pytest.param("172.16.0", 24, id="truncated"),
            pytest.param("fe80::1", 64, id="ipv6"),
            pytest.param("172.16.0.1", 31, id="too-small"),
            pytest.param("172.16.0.1", 0, id="zero"),
            pytest.param("172.16.0.1", "wide", id="not-a-number"),
        ],
    )
    def test_invalid(self, gateway, prefix_length):
        with pytest.raises(InvalidAddressError):
            net.Subnet.from_gateway(gateway, prefix_length)

    def test_contains(self):
        subnet = net.Subnet.from_gateway("172.16.0.1", 30)
        assert subnet.contains("172.16.0.2")
        assert subnet.contains(ipaddress.IPv4Address("172.16.0.1"))
        assert not subnet.contains("172.16.0.0")
        assert not subnet.contains("172.16.0.3")
        assert not subnet.contains("172.16.1.2")


class TestIsWithinSubnet:
    @pytest.mark.parametrize(
        "address,expected",
        [
            ("172.16.0.1", True),
            ("172.16.0.2", True),
            ("172.16.0.254", True),
            ("172.16.0.0", False),
            ("172.16.0.255", False),
            ("172.16.1.1", False),
            ("10.0.0.1", False),
            ("172.16.0", False),
            ("", False),
        ],
    )
    def test_is_within_subnet(self, address, expected):
        assert expected is net.is_within_subnet(address, "172.16.0.1", 24)

    def test_bad_subnet(self):
        assert not net.is_within_subnet("172.16.0.2", "172.16.0.1", 40)


class TestAddressHelpers:
    @pytest.mark.parametrize(
        "address,is_ip",
        [
            ("172.16.0.1", True),
            ("::1", True),
            ("localhost", False),
            ("172.16.0.256", False),
        ],
    )
    def test_is_ip_address(self, address, is_ip):
        assert is_ip is net.is_ip_address(address)
