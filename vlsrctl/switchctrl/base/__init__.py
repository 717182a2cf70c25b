"""Abstract base classes for switch sessions."""

from vlsrctl.switchctrl.base.client import BaseSwitchSession
from vlsrctl.switchctrl.base.codec import Operation, ReplyCodec
from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.base.transaction import ProvisioningTransaction, TransactionState
from vlsrctl.switchctrl.base.transport import SWITCH_PROMPT, BaseTransport, ShellTransport

__all__ = [
    "BaseTransport",
    "ShellTransport",
    "SWITCH_PROMPT",
    "BaseSwitchSession",
    "ProvisioningSession",
    "ProvisioningTransaction",
    "TransactionState",
    "Operation",
    "ReplyCodec",
]
