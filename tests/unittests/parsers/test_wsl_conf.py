# This file is part of wslip. See LICENSE file for license information.

import pytest

from wslip.exceptions import ParseError
from wslip.parsers.wsl_conf import WslConf

NORMALIZED = """\
# Managed by wslip
[network]
gateway_ip_address = 172.16.0.1
prefix_length = 24
dns_servers = 1.1.1.1, 8.8.8.8

# one address per instance
[static_ips]
Ubuntu = 172.16.0.2  # primary
empty =

[unknown]
keep = me
# trailing comment"""


class TestWslConf:
    def test_round_trip_of_normalized_text(self):
        assert NORMALIZED == str(WslConf.parse(NORMALIZED))

    def test_values_are_literal_strings(self):
        conf = WslConf.parse(NORMALIZED)
        assert "1.1.1.1, 8.8.8.8" == conf["network"]["dns_servers"]
        assert "172.16.0.2" == conf["static_ips"]["Ubuntu"]
        assert "" == conf["static_ips"]["empty"]

    def test_order_is_preserved(self):
        conf = WslConf.parse(NORMALIZED)
        assert ["network", "static_ips", "unknown"] == conf.sections
        assert [
            "gateway_ip_address",
            "prefix_length",
            "dns_servers",
        ] == conf["network"].scalars

    def test_spacing_is_normalized(self):
        conf = WslConf.parse("[network]\n  gateway_ip_address=172.16.0.1\n")
        assert "[network]\ngateway_ip_address = 172.16.0.1" == str(conf)

    def test_last_duplicate_key_wins(self):
        conf = WslConf.parse(
            "[static_ips]\n"
            "ubuntu = 172.16.0.2\n"
            "debian = 172.16.0.4\n"
            "ubuntu = 172.16.0.3\n"
            "[ip_offsets]\n"
            "ubuntu = 1\n"
        )
        assert "172.16.0.3" == conf["static_ips"]["ubuntu"]
        assert ["debian", "ubuntu"] == conf["static_ips"].scalars
        assert "1" == conf["ip_offsets"]["ubuntu"]

    def test_same_key_in_other_subsection_is_kept(self):
        conf = WslConf.parse("[a]\n[[s]]\nk = 1\n[b]\n[[s]]\nk = 2\n")
        assert "1" == conf["a"]["s"]["k"]
        assert "2" == conf["b"]["s"]["k"]

    def test_commented_out_key_is_not_a_duplicate(self):
        conf = WslConf.parse("[a]\n# key = 1\nkey = 2\n")
        assert "2" == conf["a"]["key"]
        assert "[a]\n# key = 1\nkey = 2" == str(conf)

    def test_repeated_section_is_merged(self):
        conf = WslConf.parse(
            "[static_ips]\n"
            "ubuntu = 172.16.0.2\n"
            "[ip_offsets]\n"
            "alpine = 1\n"
            "[static_ips]\n"
            "debian = 172.16.0.3\n"
            "ubuntu = 172.16.0.4\n"
        )
        assert ["static_ips", "ip_offsets"] == conf.sections
        assert (
            "[static_ips]\n"
            "debian = 172.16.0.3\n"
            "ubuntu = 172.16.0.4\n"
            "[ip_offsets]\n"
            "alpine = 1"
        ) == str(conf)

    def test_repeated_section_keys_precede_subsections(self):
        conf = WslConf.parse(
            "[a]\nx = 1\n[[s]]\ny = 2\n[b]\n[[s]]\nw = 4\n[a]\nz = 3\n"
        )
        assert ["x", "z"] == conf["a"].scalars
        assert {"y": "2"} == conf["a"]["s"]
        assert {"w": "4"} == conf["b"]["s"]

    @pytest.mark.parametrize(
        "text,line_number",
        [
            pytest.param("[network]\nnot an entry\n", 2, id="bad-line"),
            pytest.param(
                "[a]\nx = 1\nx = 2\nnot an entry\n",
                4,
                id="after-dropped-duplicate",
            ),
            pytest.param(
                "[a]\nx = 1\n[b]\ny = 2\n[a]\nz = 3\n[c]\nbroken\n",
                8,
                id="after-merged-section",
            ),
            pytest.param("[a]\n; note\n", 2, id="semicolon-comment"),
        ],
    )
    def test_parse_error(self, text, line_number):
        with pytest.raises(ParseError) as excinfo:
            WslConf.parse(text, path="/home/u/.wsl-iphandler-config")
        assert line_number == excinfo.value.line_number
        assert ".wsl-iphandler-config" in str(excinfo.value)

    def test_empty(self):
        assert "" == str(WslConf.parse(""))
