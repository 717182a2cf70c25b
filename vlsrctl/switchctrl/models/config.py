"""Per-switch configuration."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Self

from pydantic import BaseModel, Field, model_validator

TELNET_EXEC = "/usr/bin/telnet"
TELNET_PORT = 23
SSH_PORT = 22
TL1_TELNET_PORT = 10201

SWITCH_CTRL_PORT = 0xFFFF


class SessionType(Enum):
    """How the remote shell is reached."""

    TELNET = "telnet"
    SSH = "ssh"
    TL1_TELNET = "tl1_telnet"

    @property
    def default_port(self) -> int:
        return {
            SessionType.TELNET: TELNET_PORT,
            SessionType.SSH: SSH_PORT,
            SessionType.TL1_TELNET: TL1_TELNET_PORT,
        }[self]


class VendorModel(Enum):
    """Supported vendor/model tags."""

    JUNIPER_EX3200 = "juniper_ex3200"
    POWERCONNECT_6024 = "powerconnect6024"
    POWERCONNECT_6224 = "powerconnect6224"
    POWERCONNECT_6248 = "powerconnect6248"
    POWERCONNECT_8024 = "powerconnect8024"


class SwitchConfig(BaseModel):
    """Address, credentials and provisioning limits of one managed switch."""

    host: str
    model: VendorModel
    username: str = "admin"
    password: str = ""
    enable_password: str | None = None
    session_type: SessionType = SessionType.TELNET
    cli_port: int | None = None
    control_port: int = SWITCH_CTRL_PORT
    min_vlan: int = Field(default=2, ge=1, le=4095)
    max_vlan: int = Field(default=4094, ge=1, le=4095)
    write_timeout: int = Field(default=5, gt=0)
    read_timeout: int = Field(default=10, gt=0)
    poll_interval: int = Field(default=1, gt=0)
    telnet_exec: str = TELNET_EXEC
    snmp_community: str | None = None

    @model_validator(mode="after")
    def _check_vlan_range(self) -> Self:
        if self.min_vlan > self.max_vlan:
            raise ValueError(f"min_vlan {self.min_vlan} exceeds max_vlan {self.max_vlan}")
        return self

    @property
    def port(self) -> int:
        """CLI port, falling back to the session type's default."""
        return self.cli_port if self.cli_port is not None else self.session_type.default_port

    @property
    def snmp_enabled(self) -> bool:
        return bool(self.snmp_community)

    @classmethod
    def from_file(cls, path: str | Path) -> SwitchConfig:
        """Load a config from a JSON file."""
        return cls.model_validate_json(Path(path).read_text())
