"""Data models for switch provisioning."""

from vlsrctl.switchctrl.models.config import SessionType, SwitchConfig, VendorModel
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.port import UnifiedPort, make_unified_port, split_unified_port
from vlsrctl.switchctrl.models.vlan import VlanPortMap, VlanPortMapList

__all__ = [
    "SwitchConfig",
    "SessionType",
    "VendorModel",
    "Outcome",
    "UnifiedPort",
    "make_unified_port",
    "split_unified_port",
    "VlanPortMap",
    "VlanPortMapList",
]
