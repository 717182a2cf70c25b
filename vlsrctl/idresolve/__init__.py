"""ID resolution: SNMP walks mapping interface indexes to ports and VLANs."""

from vlsrctl.idresolve._util import parse_junos_port_name, parse_junos_vlan_name
from vlsrctl.idresolve.models import PortRefID, PortRefTable, VlanRefID, VlanRefTable
from vlsrctl.idresolve.resolver import ReferenceTableBuilder
from vlsrctl.idresolve.snmp import walk_subtree

__all__ = [
    "ReferenceTableBuilder",
    "walk_subtree",
    "parse_junos_port_name",
    "parse_junos_vlan_name",
    "PortRefID",
    "PortRefTable",
    "VlanRefID",
    "VlanRefTable",
]
