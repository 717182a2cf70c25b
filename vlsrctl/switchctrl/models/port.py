"""Unified port numbering shared by every vendor."""

from __future__ import annotations

import re
from dataclasses import dataclass

from vlsrctl.switchctrl.exceptions import PortError

_PORT_TEXT = re.compile(r"^\s*(\d+)/(\d+)/(\d+)\s*$")


def make_unified_port(module: int, slot: int, port: int) -> int:
    """Pack module/slot/port into the daemon's unified port number."""
    return ((module & 0xF) << 12) | ((slot & 0xF) << 8) | (port & 0xFF)


def split_unified_port(unified: int) -> tuple[int, int, int]:
    """Inverse of :func:`make_unified_port`."""
    return (unified >> 12) & 0xF, (unified >> 8) & 0xF, unified & 0xFF


@dataclass(frozen=True)
class UnifiedPort:
    """A physical port as module/slot/port."""

    module: int
    slot: int
    port: int

    def __post_init__(self) -> None:
        if not (0 <= self.module <= 0xF and 0 <= self.slot <= 0xF and 0 <= self.port <= 0xFF):
            raise PortError(f"Port {self.module}/{self.slot}/{self.port} out of range")

    def to_int(self) -> int:
        return make_unified_port(self.module, self.slot, self.port)

    @classmethod
    def from_int(cls, unified: int) -> UnifiedPort:
        return cls(*split_unified_port(unified))

    @classmethod
    def parse(cls, text: str) -> UnifiedPort:
        """Parse ``"m/s/p"`` or a plain (decimal or ``0x``) unified number."""
        m = _PORT_TEXT.match(text)
        if m:
            return cls(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        try:
            return cls.from_int(int(text, 0))
        except ValueError as e:
            raise PortError(f"Cannot parse port '{text}'") from e

    def __str__(self) -> str:
        return f"{self.module}/{self.slot}/{self.port}"
