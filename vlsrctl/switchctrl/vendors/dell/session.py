"""Dell PowerConnect 6024/6224/6248/8024 session over the plain CLI."""

from __future__ import annotations

import re
from typing import Any

from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.base.transport import SWITCH_PROMPT, ShellTransport
from vlsrctl.switchctrl.exceptions import PortError
from vlsrctl.switchctrl.factory import register_vendor
from vlsrctl.switchctrl.models.config import SwitchConfig, VendorModel
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.port import make_unified_port, split_unified_port
from vlsrctl.switchctrl.vendors.dell.codec import DellPowerConnectCodec

COMMAND_ENABLE = "enable"
COMMAND_NO_PAGING = "terminal length 0"
SAVE_CONFIRM = "(y/n)"

# Number of gigabit ports numbered ahead of the 10G ports in the port bitmap
XG_BIT_OFFSETS = {
    VendorModel.POWERCONNECT_6024: 24,
    VendorModel.POWERCONNECT_6224: 24,
    VendorModel.POWERCONNECT_6248: 48,
    VendorModel.POWERCONNECT_8024: 0,
}

SLOT_GIGABIT = 0
SLOT_TEN_GIGABIT = 1


@register_vendor(*XG_BIT_OFFSETS)
class DellPowerConnectSession(ProvisioningSession):
    """Dell PowerConnect stack member 1.

    Ports are ``1/gN`` (slot 0) and ``1/xgN`` (slot 1); the port bitmap is
    1-based with the 10G ports following the gigabit ones.
    """

    MODELS = tuple(XG_BIT_OFFSETS)
    # console>  console#  console(config)#  console(config-if-1/g5)#
    PROMPT_PATTERN = re.compile(r"(?:^|[\r\n])[\w.\-]+(?:\([\w./\-]+\))?[>#]\s*$")
    LOGIN_PROMPT = "User Name:"
    PASSWORD_PROMPT = "Password:"
    LOGOUT_TEXT = "logout\n"
    # PortList port 1 is 1/g1, i.e. map bit 1
    PORTLIST_BIT_OFFSET = 1

    def __init__(self, config: SwitchConfig, transport: ShellTransport | None = None) -> None:
        super().__init__(config, transport)
        self.codec = DellPowerConnectCodec(self.PROMPT_PATTERN)

    @property
    def xg_offset(self) -> int:
        return XG_BIT_OFFSETS.get(self.model, 0)

    def engage(self, login_pattern: str) -> None:
        super().engage(login_pattern)
        cfg = self.config
        t = self.transport
        t.write(COMMAND_ENABLE + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        if cfg.enable_password:
            t.read_until(self.PASSWORD_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
            t.write(cfg.enable_password + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        t.read_until(SWITCH_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
        t.write(COMMAND_NO_PAGING + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        t.read_until(SWITCH_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)

    def post_action_with_commit(self) -> Outcome:
        """Leave configuration mode, then save the running config.

        PowerConnect changes take effect as they are typed; the save is only
        accepted from privileged exec mode.
        """
        released = self.apply(Operation.UNLOCK)
        if not released:
            return released
        return self.apply(Operation.COMMIT)

    def _exchange(self, op: Operation, **params: Any) -> Outcome:
        cfg = self.config
        t = self.transport
        t.discard_pending()
        for command in self.codec.commands(op, **params):
            t.write(command + self.LINE_TERMINATOR, timeout=cfg.write_timeout, expect_echo=True)
            if op is Operation.COMMIT:
                t.read_until(SAVE_CONFIRM, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
                t.write("y" + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
            reply = t.read_until(SWITCH_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
            outcome = self.codec.parse(reply, op, command=command)
            if not outcome:
                return outcome
        return Outcome.success()

    def port_to_bit(self, port: int) -> int:
        module, slot, num = split_unified_port(port)
        offset = self.xg_offset
        if module != 1 or num == 0:
            raise PortError(f"{module}/{slot}/{num} does not exist on {self.model.value}")
        if slot == SLOT_GIGABIT and num <= offset:
            return num
        if slot == SLOT_TEN_GIGABIT and num + offset <= 0xFF:
            return num + offset
        raise PortError(f"{module}/{slot}/{num} does not exist on {self.model.value}")

    def bit_to_port(self, bit: int) -> int:
        offset = self.xg_offset
        if not 0 < bit <= 0xFF:
            raise PortError(f"bit {bit} does not map to a port on {self.model.value}")
        if bit <= offset:
            return make_unified_port(1, SLOT_GIGABIT, bit)
        return make_unified_port(1, SLOT_TEN_GIGABIT, bit - offset)
