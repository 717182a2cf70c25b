"""Switch control: VLAN provisioning on Juniper EX and Dell PowerConnect switches."""

import vlsrctl.switchctrl.vendors  # noqa: F401  # trigger vendor registration

from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import (
    AuthenticationError,
    PortError,
    PreconditionError,
    ProtocolError,
    ReadTimeoutError,
    SSHError,
    SwitchError,
    TransportError,
    VLANError,
)
from vlsrctl.switchctrl.factory import create_session, list_models
from vlsrctl.switchctrl.registry import SessionRegistry

__all__ = [
    "create_session",
    "list_models",
    "ProvisioningSession",
    "SessionRegistry",
    "ShellTransport",
    "SwitchError",
    "TransportError",
    "SSHError",
    "AuthenticationError",
    "ReadTimeoutError",
    "ProtocolError",
    "PreconditionError",
    "PortError",
    "VLANError",
]
