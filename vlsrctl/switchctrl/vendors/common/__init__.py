"""Transports and codecs shared between vendors."""

from vlsrctl.switchctrl.vendors.common.cli_codec import CLICodec
from vlsrctl.switchctrl.vendors.common.spawned import SpawnedShellTransport
from vlsrctl.switchctrl.vendors.common.ssh import ParamikoShellTransport

__all__ = [
    "CLICodec",
    "SpawnedShellTransport",
    "ParamikoShellTransport",
]
