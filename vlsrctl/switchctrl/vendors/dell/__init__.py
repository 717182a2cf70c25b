"""Dell PowerConnect switches (plain CLI)."""

from vlsrctl.switchctrl.vendors.dell.codec import DellPowerConnectCodec
from vlsrctl.switchctrl.vendors.dell.session import DellPowerConnectSession

__all__ = [
    "DellPowerConnectSession",
    "DellPowerConnectCodec",
]
