#!/usr/bin/env python3

# This file is part of wslip. See LICENSE file for license information.

"""Command line entry point: assign, release and inspect instance addresses.

Each invocation loads the config file, performs one operation in memory and
writes the files it changed exactly once at the end.
"""

import argparse
import logging
import os
import sys

import yaml

from wslip import config, log, settings, util, version
from wslip.config import ConfigStore
from wslip.exceptions import WslIpError
from wslip.hosts import HostsStore
from wslip.reconciler import DynamicRequest, Reconciler, StaticRequest

LOG = logging.getLogger(__name__)


def get_cfg(args, environ=None) -> dict:
    """Built-in defaults, then environment, then command line flags."""
    environ = os.environ if environ is None else environ
    cfg = dict(settings.CFG_BUILTIN)
    if environ.get(settings.CFG_ENV_NAME):
        cfg["config_path"] = environ[settings.CFG_ENV_NAME]
    if environ.get(settings.HOSTS_ENV_NAME):
        cfg["hosts_path"] = environ[settings.HOSTS_ENV_NAME]
    if getattr(args, "config_path", None):
        cfg["config_path"] = args.config_path
    if getattr(args, "hosts_path", None):
        cfg["hosts_path"] = args.hosts_path
    if getattr(args, "backup", False):
        cfg["backup"] = True
    if getattr(args, "debug", False):
        cfg["log_level"] = "DEBUG"
    cfg["config_path"] = util.expand_path(cfg["config_path"])
    cfg["hosts_path"] = util.expand_path(cfg["hosts_path"])
    return cfg


def load_reconciler(cfg) -> Reconciler:
    return Reconciler(
        ConfigStore.from_path(cfg["config_path"]),
        HostsStore(cfg["hosts_path"]),
    )


def dump(data):
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def handle_assign_args(name, args, cfg):
    reconciler = load_reconciler(cfg)
    if args.dynamic:
        request = DynamicRequest()
    else:
        request = StaticRequest(
            address=args.address,
            gateway=args.gateway,
            prefix_length=args.prefix_length,
        )
    assignment = reconciler.assign(args.instance, request)
    reconciler.save(backup=cfg["backup"])
    print(dump(assignment.as_dict()), end="")
    return 0


def handle_release_args(name, args, cfg):
    reconciler = load_reconciler(cfg)
    result = reconciler.release(args.instance)
    if args.clear_network:
        if result.clear_network:
            reconciler.clear_network()
        else:
            LOG.warning(
                "Keeping network settings, other instances still use"
                " static addresses"
            )
    reconciler.save(backup=cfg["backup"])
    print(
        dump(
            {
                "instance": args.instance,
                "released": result.changed,
                "network_clearable": result.clear_network,
            }
        ),
        end="",
    )
    return 0


def handle_show_args(name, args, cfg):
    reconciler = load_reconciler(cfg)
    if args.instance:
        assignment = reconciler.get_assignment(args.instance)
        if assignment is None:
            return log.error("No address assigned to %s" % args.instance)
        print(dump(assignment.as_dict()), end="")
        return 0
    network = config.read_network_config(reconciler.config)
    data = {
        "network": dict(network._asdict()),
        "assignments": [a.as_dict() for a in reconciler.assignments()],
    }
    print(dump(data), end="")
    return 0


def handle_network_args(name, args, cfg):
    reconciler = load_reconciler(cfg)
    if args.network_action == "clear":
        reconciler.clear_network()
    else:
        config.write_network_config(
            reconciler.config,
            gateway=args.gateway,
            prefix_length=args.prefix_length,
            dns_servers=args.dns_servers,
            windows_host_name=args.windows_host_name,
            dynamic_adapters=args.dynamic_adapters,
        )
    reconciler.save(backup=cfg["backup"])
    network = config.read_network_config(reconciler.config)
    print(dump({"network": dict(network._asdict())}), end="")
    return 0


def get_parser(parser=None):
    if not parser:
        parser = argparse.ArgumentParser(
            prog="wslip",
            description="Keep WSL instance addresses stable across reboots.",
        )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version="%(prog)s " + (version.version_string()),
        help="Show program's version number and exit.",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Show debug logging (default: %(default)s).",
        default=False,
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        help="Config file to use (default: ~/%s)."
        % settings.DEFAULT_CONFIG_NAME,
    )
    parser.add_argument(
        "--hosts",
        dest="hosts_path",
        help="Hosts file to update (default: %s)." % settings.HOSTS_FILE,
    )
    parser.add_argument(
        "--backup",
        action="store_true",
        default=False,
        help="Keep a timestamped copy of each file before changing it.",
    )
    subparsers = parser.add_subparsers(title="Subcommands", dest="subcommand")
    subparsers.required = True

    parser_assign = subparsers.add_parser(
        "assign", help="Give an instance a static address or an offset."
    )
    parser_assign.add_argument("instance", help="WSL instance name.")
    mode = parser_assign.add_mutually_exclusive_group()
    mode.add_argument(
        "--address",
        help="Static address to use instead of the next free one.",
    )
    mode.add_argument(
        "--dynamic",
        action="store_true",
        default=False,
        help="Assign an offset resolved when the instance starts.",
    )
    parser_assign.add_argument("--gateway", help="Gateway address.")
    parser_assign.add_argument(
        "--prefix-length", type=int, help="Subnet prefix length."
    )
    parser_assign.set_defaults(action=("assign", handle_assign_args))

    parser_release = subparsers.add_parser(
        "release", help="Forget the address of an instance."
    )
    parser_release.add_argument("instance", help="WSL instance name.")
    parser_release.add_argument(
        "--clear-network",
        action="store_true",
        default=False,
        help="Also drop network settings once no static address needs them.",
    )
    parser_release.set_defaults(action=("release", handle_release_args))

    parser_show = subparsers.add_parser(
        "show", help="Show network settings and assignments."
    )
    parser_show.add_argument(
        "instance", nargs="?", help="Only show this instance."
    )
    parser_show.set_defaults(action=("show", handle_show_args))

    parser_network = subparsers.add_parser(
        "network", help="Change the shared network settings."
    )
    parser_network.add_argument(
        "network_action", choices=["set", "clear"], help="What to do."
    )
    parser_network.add_argument("--gateway", help="Gateway address.")
    parser_network.add_argument(
        "--prefix-length", type=int, help="Subnet prefix length."
    )
    parser_network.add_argument(
        "--dns-server",
        dest="dns_servers",
        action="append",
        help="DNS server, may be repeated.",
    )
    parser_network.add_argument(
        "--windows-host-name", help="Name instances use to reach the host."
    )
    parser_network.add_argument(
        "--dynamic-adapter",
        dest="dynamic_adapters",
        action="append",
        help="Adapter whose address changes, may be repeated.",
    )
    parser_network.set_defaults(action=("network", handle_network_args))
    return parser


def sub_main(args):
    (name, functor) = args.action
    cfg = get_cfg(args)
    log.setup_basic_logging(log.level_from_name(cfg["log_level"]))
    LOG.debug("Running %s with %s", name, cfg)
    try:
        return functor(name, args, cfg)
    except (WslIpError, ValueError, OSError) as e:
        log.logexc(LOG, "%s failed", name, log_level=logging.DEBUG)
        return log.error(e)
    finally:
        log.flush_loggers(LOG)


def main(sysv_args=None):
    if not sysv_args:
        sysv_args = sys.argv
    sysv_args = list(sysv_args)
    parser = get_parser(argparse.ArgumentParser(prog=sysv_args.pop(0)))
    args = parser.parse_args(args=sysv_args)
    return sub_main(args)


if __name__ == "__main__":
    sys.exit(main(sys.argv))
