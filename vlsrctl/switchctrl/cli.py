"""CLI entry point for switch provisioning, standalone-capable.

Supported models:
  - juniper_ex3200    Juniper EX3200: JUNOScript over telnet/SSH
  - powerconnect6024  Dell PowerConnect 6024: CLI
  - powerconnect6224  Dell PowerConnect 6224: CLI
  - powerconnect6248  Dell PowerConnect 6248: CLI
  - powerconnect8024  Dell PowerConnect 8024: CLI (10G ports only)

Ports are given as module/slot/port (1/0/5 is 1/g5 on a PowerConnect,
0/0/5 is ge-0/0/5 on a Juniper EX).

Examples:
  # Login test
  vlsrctl switchctrl --model juniper_ex3200 --host 10.0.0.2 \\
      --username vlsr --password <PW> connect

  # Create VLAN 100 and add ge-0/0/5 to it tagged
  vlsrctl switchctrl --model juniper_ex3200 --host 10.0.0.2 \\
      --username vlsr --password <PW> vlan create 100
  vlsrctl switchctrl --model juniper_ex3200 --host 10.0.0.2 \\
      --username vlsr --password <PW> port tagged 0/0/5 100

  # Switch settings from a JSON file
  vlsrctl switchctrl --config pc6248.json port untagged 1/0/12 200
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger
from pydantic import ValidationError

from vlsrctl.switchctrl import SwitchError, create_session, list_models
from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.models.config import SessionType, SwitchConfig, VendorModel
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.port import UnifiedPort


def _port(text: str) -> int:
    try:
        return UnifiedPort.parse(text).to_int()
    except SwitchError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def cmd_vlan_create(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    return session.create_vlan(args.vlan_id)


def cmd_vlan_remove(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    return session.remove_vlan(args.vlan_id)


def cmd_vlan_ports(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    """List the ports in a VLAN, as read over SNMP at login when a community is set."""
    ports = session.get_port_list_by_vlan(args.vlan_id)
    if not ports:
        print(f"VLAN {args.vlan_id}: no ports")
    for port in ports:
        untagged = session.get_vlan_by_untagged_port(port) == args.vlan_id
        print(f"  {UnifiedPort.from_int(port)!s:10s}  {'untagged' if untagged else 'tagged'}")
    return Outcome.success()


def cmd_port_tagged(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    return session.move_port_to_vlan_as_tagged(args.port, args.vlan_id)


def cmd_port_untagged(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    return session.move_port_to_vlan_as_untagged(args.port, args.vlan_id)


def cmd_port_remove(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    return session.remove_port_from_vlan(args.port, args.vlan_id)


def cmd_connect(session: ProvisioningSession, args: argparse.Namespace) -> Outcome:
    print(f"Logged into {session.host} ({session.model.value})")
    return Outcome.success()


COMMANDS = {
    ("vlan", "create"): cmd_vlan_create,
    ("vlan", "remove"): cmd_vlan_remove,
    ("vlan", "ports"): cmd_vlan_ports,
    ("port", "tagged"): cmd_port_tagged,
    ("port", "untagged"): cmd_port_untagged,
    ("port", "remove"): cmd_port_remove,
    ("connect", None): cmd_connect,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for switch provisioning."""
    parser = argparse.ArgumentParser(
        prog="vlsrctl-switchctrl",
        description="Switch provisioning: VLAN creation and port membership",
    )
    parser.add_argument("--config", help="JSON file with the switch settings (overrides the flags below)")
    parser.add_argument("--model", choices=list_models(), help="Switch model")
    parser.add_argument("--host", help="Switch IP address or hostname")
    parser.add_argument("--username", default="admin", help="Username (default: admin)")
    parser.add_argument("--password", default="", help="Login password")
    parser.add_argument("--enable-password", help="Enable password (PowerConnect)")
    parser.add_argument(
        "--session-type",
        choices=[t.value for t in SessionType],
        default=SessionType.TELNET.value,
        help="How to reach the CLI (default: telnet)",
    )
    parser.add_argument("--cli-port", type=int, help="CLI port (default depends on session type)")
    parser.add_argument("--snmp-community", help="SNMP community; VLAN membership is read from the switch when set")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("connect", help="Log in and out again")

    # vlan
    vlan_parser = subparsers.add_parser("vlan", help="VLAN management")
    vlan_sub = vlan_parser.add_subparsers(dest="subcommand", help="VLAN commands")
    for name, help_text in (
        ("create", "Create a VLAN"),
        ("remove", "Remove a VLAN"),
        ("ports", "List the ports in a VLAN"),
    ):
        sub = vlan_sub.add_parser(name, help=help_text)
        sub.add_argument("vlan_id", type=int, help="VLAN ID")

    # port
    port_parser = subparsers.add_parser("port", help="Port membership")
    port_sub = port_parser.add_subparsers(dest="subcommand", help="Port commands")
    for name, help_text in (
        ("tagged", "Add a port to a VLAN as tagged member"),
        ("untagged", "Move a port into a VLAN as untagged member"),
        ("remove", "Remove a port from a VLAN"),
    ):
        sub = port_sub.add_parser(name, help=help_text)
        sub.add_argument("port", type=_port, help="Port as module/slot/port")
        sub.add_argument("vlan_id", type=int, help="VLAN ID")

    return parser


def load_config(parser: argparse.ArgumentParser, parsed: argparse.Namespace) -> SwitchConfig:
    """Switch settings from ``--config`` or from the individual flags."""
    try:
        if parsed.config:
            return SwitchConfig.from_file(parsed.config)
        if not parsed.model or not parsed.host:
            parser.error("--model and --host are required without --config")
        return SwitchConfig(
            host=parsed.host,
            model=VendorModel(parsed.model),
            username=parsed.username,
            password=parsed.password,
            enable_password=parsed.enable_password,
            session_type=SessionType(parsed.session_type),
            cli_port=parsed.cli_port,
            snmp_community=parsed.snmp_community,
        )
    except (OSError, ValidationError) as e:
        parser.error(f"invalid switch settings: {e}")


def main(args: list[str] | None = None) -> None:
    """Main entry point for switch provisioning CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    handler = COMMANDS.get((parsed.command, getattr(parsed, "subcommand", None)))
    if handler is None:
        print(f"Usage: vlsrctl-switchctrl ... {parsed.command} {{...}}", file=sys.stderr)
        sys.exit(1)

    config = load_config(parser, parsed)

    try:
        with create_session(config) as session:
            if not session.connect_switch():
                print(f"Error: cannot log into {config.host}", file=sys.stderr)
                sys.exit(1)
            outcome = handler(session, parsed)
    except SwitchError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)

    if not outcome:
        print(f"Error: {outcome.diagnostic}", file=sys.stderr)
        sys.exit(1)
    if outcome.diagnostic:
        print(outcome.diagnostic)


if __name__ == "__main__":
    main()
