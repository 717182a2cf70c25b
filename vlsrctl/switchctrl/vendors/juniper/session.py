"""Juniper EX3200 session driven through JUNOScript."""

from __future__ import annotations

import re
from typing import Any

from loguru import logger

from vlsrctl.idresolve._util import parse_junos_port_name, parse_junos_vlan_name
from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import PortError
from vlsrctl.switchctrl.factory import register_vendor
from vlsrctl.switchctrl.models.config import SwitchConfig, VendorModel
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.port import make_unified_port, split_unified_port
from vlsrctl.switchctrl.vendors.juniper.junoscript import (
    REPLY_END,
    REPLY_START,
    SESSION_END,
    SESSION_OPEN,
    JUNOScriptCodec,
)

COMMAND_JUNOSCRIPT = "junoscript"

# EX3200: up to 8 members in a virtual chassis, 4 PICs, 64 ports per PIC
MAX_MODULES = 8
MAX_SLOTS = 4
MAX_PORTS = 64


@register_vendor(VendorModel.JUNIPER_EX3200)
class JuniperEX3200Session(ProvisioningSession):
    """Juniper EX3200 switch.

    After the CLI login the session switches the shell into JUNOScript mode
    and from then on exchanges ``<rpc>`` / ``<rpc-reply>`` fragments only.
    """

    MODELS = (VendorModel.JUNIPER_EX3200,)
    PROMPT_PATTERN = re.compile(r"(?:^|[\r\n])[\w.\-]+@[\w.\-]+[>#%]\s*$")
    LOGOUT_TEXT = SESSION_END + "\n"

    port_name_parser = staticmethod(parse_junos_port_name)
    vlan_name_parser = staticmethod(parse_junos_vlan_name)

    def __init__(self, config: SwitchConfig, transport: ShellTransport | None = None) -> None:
        super().__init__(config, transport)
        self.codec = JUNOScriptCodec()

    def engage(self, login_pattern: str) -> None:
        super().engage(login_pattern)
        self._start_junoscript()

    def _start_junoscript(self) -> None:
        """Enter JUNOScript mode and open the session document."""
        cfg = self.config
        t = self.transport
        t.write(COMMAND_JUNOSCRIPT + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        t.read_until("<!-- session start", "-->", timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
        t.write(SESSION_OPEN + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        greeting = t.read_until("<!-- user", "-->", timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
        logger.debug(f"[{self.host}] JUNOScript session open: {greeting.strip()!r}")

    def _exchange(self, op: Operation, **params: Any) -> Outcome:
        cfg = self.config
        t = self.transport
        t.discard_pending()
        t.write(self.codec.compose(op, **params) + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
        reply = t.read_until(
            REPLY_START, REPLY_END, read_all=True, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval
        )
        return self.codec.parse(reply, op)

    def port_to_bit(self, port: int) -> int:
        module, slot, num = split_unified_port(port)
        if module >= MAX_MODULES or slot >= MAX_SLOTS or num >= MAX_PORTS:
            raise PortError(f"ge-{module}/{slot}/{num} does not exist on {self.model.value}")
        return module * MAX_SLOTS * MAX_PORTS + slot * MAX_PORTS + num

    def bit_to_port(self, bit: int) -> int:
        if not 0 <= bit < MAX_MODULES * MAX_SLOTS * MAX_PORTS:
            raise PortError(f"bit {bit} does not map to a port on {self.model.value}")
        module, rest = divmod(bit, MAX_SLOTS * MAX_PORTS)
        slot, num = divmod(rest, MAX_PORTS)
        return make_unified_port(module, slot, num)
