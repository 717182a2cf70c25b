"""VLAN membership bitmaps."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

MAX_VLAN_PORT_BYTES = 256
MAX_VLAN_PORT_BITS = MAX_VLAN_PORT_BYTES * 8

VLAN_NONE = 0
VLAN_DEFAULT = 1


def _check_bit(bit: int) -> None:
    if not 0 <= bit < MAX_VLAN_PORT_BITS:
        raise IndexError(f"Port bit {bit} outside 0..{MAX_VLAN_PORT_BITS - 1}")


@dataclass
class VlanPortMap:
    """One bit per port in the vendor's numbering space, MSB first."""

    vid: int
    portbits: bytearray = field(default_factory=lambda: bytearray(MAX_VLAN_PORT_BYTES))

    def set_bit(self, bit: int) -> None:
        _check_bit(bit)
        self.portbits[bit // 8] |= 0x80 >> (bit % 8)

    def reset_bit(self, bit: int) -> None:
        _check_bit(bit)
        self.portbits[bit // 8] &= ~(0x80 >> (bit % 8)) & 0xFF

    def has_bit(self, bit: int) -> bool:
        _check_bit(bit)
        return bool(self.portbits[bit // 8] & (0x80 >> (bit % 8)))

    def is_empty(self) -> bool:
        return not any(self.portbits)

    def bits(self) -> Iterator[int]:
        """Yield the set bits in ascending order."""
        for byte_idx, byte_val in enumerate(self.portbits):
            if not byte_val:
                continue
            for offset in range(8):
                if byte_val & (0x80 >> offset):
                    yield byte_idx * 8 + offset


class VlanPortMapList:
    """Port maps keyed by VLAN ID, created on first lookup."""

    def __init__(self) -> None:
        self._maps: dict[int, VlanPortMap] = {}

    def get_or_create(self, vid: int) -> VlanPortMap:
        vpm = self._maps.get(vid)
        if vpm is None:
            vpm = self._maps[vid] = VlanPortMap(vid)
        return vpm

    def get(self, vid: int) -> VlanPortMap | None:
        return self._maps.get(vid)

    def put(self, vpm: VlanPortMap) -> None:
        """Store ``vpm`` under its own VLAN ID, replacing any previous map."""
        self._maps[vpm.vid] = vpm

    def remove(self, vid: int) -> None:
        self._maps.pop(vid, None)

    def vlans_with_bit(self, bit: int) -> list[int]:
        """VLAN IDs whose map has ``bit`` set."""
        return sorted(vid for vid, vpm in self._maps.items() if vpm.has_bit(bit))

    def clear(self) -> None:
        self._maps.clear()

    def __contains__(self, vid: object) -> bool:
        return vid in self._maps

    def __iter__(self) -> Iterator[VlanPortMap]:
        return iter(self._maps[vid] for vid in sorted(self._maps))

    def __len__(self) -> int:
        return len(self._maps)
