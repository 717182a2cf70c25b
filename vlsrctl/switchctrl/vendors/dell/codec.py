"""Dell PowerConnect 6200/8000 command lines."""

from __future__ import annotations

from typing import Any

from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.vendors.common.cli_codec import CLICodec

DELL_ERROR_PROMPT = "% "

COMMAND_CONFIGURE = "configure"
COMMAND_END = "end"
COMMAND_EXIT = "exit"
COMMAND_SAVE = "copy running-config startup-config"
COMMAND_VLAN_DATABASE = "vlan database"


def port_to_name(port: int) -> str:
    """``1/gN`` for slot 0, ``1/xgN`` otherwise (as named in ospfd.conf)."""
    if (port >> 8) & 0x0F == 0:
        return f"1/g{port & 0xFF}"
    return f"1/xg{port & 0xFF}"


class DellPowerConnectCodec(CLICodec):
    """PowerConnect CLI: ``switchport general`` membership inside ``configure``."""

    error_prompt = DELL_ERROR_PROMPT

    def commands(self, op: Operation, **params: Any) -> list[str]:
        if op is Operation.LOCK:
            return [COMMAND_CONFIGURE]
        if op is Operation.UNLOCK:
            return [COMMAND_END]
        if op is Operation.COMMIT:
            return [COMMAND_SAVE]

        vlan_id = params["vlan_id"]
        if op is Operation.CREATE_VLAN:
            return [COMMAND_VLAN_DATABASE, f"vlan {vlan_id}", COMMAND_EXIT]
        if op is Operation.REMOVE_VLAN:
            return [COMMAND_VLAN_DATABASE, f"no vlan {vlan_id}", COMMAND_EXIT]

        tagged = params.get("tagged", False)
        commands = [f"interface ethernet {port_to_name(params['port'])}"]
        if op is Operation.ADD_VLAN_PORT:
            commands.append("switchport mode general")
            commands.append(f"switchport general allowed vlan add {vlan_id} {'tagged' if tagged else 'untagged'}")
            if not tagged:
                commands.append(f"switchport general pvid {vlan_id}")
        elif op is Operation.DELETE_VLAN_PORT:
            commands.append(f"switchport general allowed vlan remove {vlan_id}")
            if not tagged:
                commands.append("no switchport general pvid")
        else:
            raise ValueError(f"Unsupported operation {op}")
        commands.append(COMMAND_EXIT)
        return commands
