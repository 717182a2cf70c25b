"""Interface-name conventions and table assembly from walk results."""

from __future__ import annotations

import re
from typing import Callable

from loguru import logger

from vlsrctl.idresolve.models import PortRefID, PortRefTable, VlanRefID, VlanRefTable
from vlsrctl.switchctrl.models.port import make_unified_port

# ge-0/0/3 but not the logical unit ge-0/0/3.0
_JUNOS_PORT = re.compile(r"^ge-(\d+)/(\d+)/(\d+)$")
_JUNOS_VLAN = re.compile(r"^dynamic_vlan_(\d+)")

NameParser = Callable[[str], "int | None"]


def parse_junos_port_name(name: str) -> int | None:
    """Unified port number of a JUNOS physical interface name, or None."""
    m = _JUNOS_PORT.match(name.strip())
    if not m:
        return None
    return make_unified_port(int(m.group(1)), int(m.group(2)), int(m.group(3)))


def parse_junos_vlan_name(name: str) -> int | None:
    """VLAN ID of a ``dynamic_vlan_<id>`` / ``default`` VLAN name, or None."""
    m = _JUNOS_VLAN.match(name.strip())
    if m:
        return int(m.group(1))
    if name.strip().startswith("default"):
        return 1
    return None


def build_port_ref_table(rows: list[tuple[int, str]], parse_name: NameParser = parse_junos_port_name) -> PortRefTable | None:
    """Assemble a port table from ``(ifIndex, ifDescr)`` rows.

    Returns None if no row carried a recognisable port name.
    """
    entries: list[PortRefID] = []
    for ref_id, name in rows:
        if not name:
            continue
        port_id = parse_name(name)
        if port_id is None:
            continue
        # port bits are indexed by ifIndex on these switches
        entries.append(PortRefID(ref_id=ref_id, port_id=port_id, port_bit=ref_id))

    if not entries:
        logger.warning(f"No port interfaces recognised among {len(rows)} walk results")
        return None
    return PortRefTable(entries=entries)


def build_vlan_ref_table(rows: list[tuple[int, str]], parse_name: NameParser = parse_junos_vlan_name) -> VlanRefTable | None:
    """Assemble a VLAN table from ``(index, VLAN name)`` rows, None if empty."""
    entries: list[VlanRefID] = []
    for ref_id, name in rows:
        if not name:
            continue
        vlan_id = parse_name(name)
        if vlan_id is None:
            continue
        entries.append(VlanRefID(ref_id=ref_id, vlan_id=vlan_id))

    if not entries:
        logger.warning(f"No VLAN interfaces recognised among {len(rows)} walk results")
        return None
    return VlanRefTable(entries=entries)
