"""CLI entry point for dumping a switch's port and VLAN reference tables."""

from __future__ import annotations

import argparse
import sys

from loguru import logger
from tabulate import tabulate

from vlsrctl.idresolve.resolver import ReferenceTableBuilder
from vlsrctl.idresolve.snmp import HAS_PYSNMP
from vlsrctl.switchctrl.exceptions import SwitchError
from vlsrctl.switchctrl.models.port import UnifiedPort


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Build argparse parser for the reference table dump."""
    parser = argparse.ArgumentParser(
        prog="vlsrctl-refs",
        description="Resolve a Juniper EX's interface indexes into ports and VLAN IDs via SNMPv2c.",
    )
    parser.add_argument("host", help="Switch IP address or hostname")
    parser.add_argument("community", nargs="?", default="public", help="SNMP community string (default: public)")
    which = parser.add_mutually_exclusive_group()
    which.add_argument("--ports", action="store_true", help="Only the port table")
    which.add_argument("--vlans", action="store_true", help="Only the VLAN table")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser.parse_args(args)


def main(args: list[str] | None = None) -> None:
    """Main entry point for the reference table CLI."""
    parsed = parse_args(args)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")

    if not HAS_PYSNMP:
        logger.error("pysnmp is required (pip install pysnmp)")
        sys.exit(1)

    builder = ReferenceTableBuilder(parsed.host, parsed.community)
    try:
        found = _dump(builder, parsed)
    except SwitchError as e:
        logger.error(str(e))
        sys.exit(1)

    if not found:
        logger.error(f"No reference entries found on {parsed.host}")
        sys.exit(1)


def _dump(builder: ReferenceTableBuilder, parsed: argparse.Namespace) -> bool:
    """Print the requested tables; False when none had entries."""
    found = False
    if not parsed.vlans:
        ports = builder.create_port_to_id_ref_table()
        if ports is not None:
            found = True
            rows = [
                [e.ref_id, f"ge-{UnifiedPort.from_int(e.port_id)}", f"{e.port_id:#06x}", e.port_bit]
                for e in ports.entries
            ]
            print(tabulate(rows, headers=["ifIndex", "Interface", "Port", "Bit"], tablefmt="simple"))

    if not parsed.ports:
        vlans = builder.create_vlan_interface_to_id_ref_table()
        if vlans is not None:
            found = True
            if not parsed.vlans:
                print()
            rows = [[e.ref_id, e.vlan_id] for e in vlans.entries]
            print(tabulate(rows, headers=["Index", "VLAN"], tablefmt="simple"))

    return found


if __name__ == "__main__":
    main()
