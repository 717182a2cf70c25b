"""Pydantic models for the interface-index reference tables."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PortRefID(BaseModel):
    """Switch-reported interface index of one physical port."""

    ref_id: int
    port_id: int
    port_bit: int


class VlanRefID(BaseModel):
    """Switch-reported interface index of one VLAN."""

    ref_id: int
    vlan_id: int


class PortRefTable(BaseModel):
    """Interface index <-> unified port number, in walk order.

    Built in one go by a MIB walk and never patched; ``built_at`` tells how
    stale it may be.
    """

    entries: list[PortRefID] = Field(default_factory=list)
    built_at: datetime = Field(default_factory=_now)

    def port_id_for(self, ref_id: int) -> int:
        """Unified port for an interface index, 0 if unknown."""
        return next((e.port_id for e in self.entries if e.ref_id == ref_id), 0)

    def ref_id_for_port(self, port_id: int) -> int:
        """Interface index for a unified port, 0 if unknown."""
        return next((e.ref_id for e in self.entries if e.port_id == port_id), 0)

    def __len__(self) -> int:
        return len(self.entries)


class VlanRefTable(BaseModel):
    """Interface index <-> VLAN ID, in walk order."""

    entries: list[VlanRefID] = Field(default_factory=list)
    built_at: datetime = Field(default_factory=_now)

    def vlan_id_for(self, ref_id: int) -> int:
        return next((e.vlan_id for e in self.entries if e.ref_id == ref_id), 0)

    def ref_id_for_vlan(self, vlan_id: int) -> int:
        return next((e.ref_id for e in self.entries if e.vlan_id == vlan_id), 0)

    def __len__(self) -> int:
        return len(self.entries)
