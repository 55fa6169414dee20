# This file is part of wslip. See LICENSE file for license information.

BASE_HOSTS = """\
# Copyright (c) 1993-2009 Microsoft Corp.
#
# This is a sample HOSTS file used by Microsoft TCP/IP for Windows.
127.0.0.1\tlocalhost
::1             localhost
192.168.1.10    nas.home  nas   # storage box
"""

BASE_CONFIG = """\
# Managed by wslip, edit with care
[network]
gateway_ip_address = 172.16.0.1
prefix_length = 24

[static_ips]

[ip_offsets]
"""
