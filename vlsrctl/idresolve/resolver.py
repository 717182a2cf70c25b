"""Reference table builder: SNMP walks into port and VLAN ID tables."""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from vlsrctl.idresolve._util import (
    NameParser,
    build_port_ref_table,
    build_vlan_ref_table,
    parse_junos_port_name,
    parse_junos_vlan_name,
)
from vlsrctl.idresolve.models import PortRefTable, VlanRefTable
from vlsrctl.idresolve.snmp import (
    HAS_PYSNMP,
    OID_IF_DESCR,
    OID_VLAN_EGRESS_PORTS,
    OID_VLAN_STATIC_NAME,
    OID_VLAN_UNTAGGED_PORTS,
    SNMP_ERRORS,
    snmp_walk,
)
from vlsrctl.switchctrl.exceptions import SwitchError, TransportError


class ReferenceTableBuilder:
    """Resolve a switch's interface indexes into ports and VLAN IDs via SNMPv2c."""

    def __init__(self, host: str, community: str = "public", port: int = 161) -> None:
        self.host = host
        self.community = community
        self.port = port

    def _walk_raw(self, root: str) -> list[tuple[int, Any]]:
        """Run one subtree walk to completion.

        Raises:
            SwitchError: pysnmp is not installed.
            TransportError: The agent could not be reached (bad address,
                socket failure, ...).
        """
        if not HAS_PYSNMP:
            raise SwitchError("pysnmp is required for reference table walks")
        logger.debug(f"Walking {root} on {self.host} ...")
        try:
            return asyncio.run(snmp_walk(self.host, self.community, root, port=self.port))
        except SNMP_ERRORS as e:
            raise TransportError(f"SNMP walk of {root} on {self.host} failed: {e}") from e

    def walk(self, root: str) -> list[tuple[int, str]]:
        """Synchronous entry point: ``(index, text)`` rows under ``root``."""
        return [(idx, str(val)) for idx, val in self._walk_raw(root)]

    def walk_octets(self, root: str) -> list[tuple[int, bytes]]:
        """``(index, raw octets)`` rows under ``root``, for PortList columns."""
        return [(idx, bytes(val)) for idx, val in self._walk_raw(root)]

    def create_port_to_id_ref_table(self, parse_name: NameParser = parse_junos_port_name) -> PortRefTable | None:
        return build_port_ref_table(self.walk(OID_IF_DESCR), parse_name)

    def create_vlan_interface_to_id_ref_table(
        self, parse_name: NameParser = parse_junos_vlan_name
    ) -> VlanRefTable | None:
        return build_vlan_ref_table(self.walk(OID_VLAN_STATIC_NAME), parse_name)

    def vlan_egress_ports(self) -> list[tuple[int, bytes]]:
        """Static egress (tagged and untagged) port lists, keyed by VLAN index."""
        return self.walk_octets(OID_VLAN_EGRESS_PORTS)

    def vlan_untagged_ports(self) -> list[tuple[int, bytes]]:
        """Static untagged port lists, keyed by VLAN index."""
        return self.walk_octets(OID_VLAN_UNTAGGED_PORTS)
