"""VLAN provisioning operations shared by every vendor session."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Callable, ClassVar

from loguru import logger

from vlsrctl.switchctrl.base.client import BaseSwitchSession
from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.base.transaction import ProvisioningTransaction
from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import PortError, PreconditionError, SwitchError, VLANError
from vlsrctl.switchctrl.models.config import SwitchConfig
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.vlan import (
    MAX_VLAN_PORT_BITS,
    MAX_VLAN_PORT_BYTES,
    VLAN_DEFAULT,
    VLAN_NONE,
    VlanPortMap,
    VlanPortMapList,
)

if TYPE_CHECKING:
    from vlsrctl.idresolve.models import PortRefTable, VlanRefTable
    from vlsrctl.idresolve.resolver import ReferenceTableBuilder


class ProvisioningSession(BaseSwitchSession):
    """Session that can change VLAN membership on the switch.

    Each mutating operation runs inside one :class:`ProvisioningTransaction`.
    The local port maps are loaded from the switch over SNMP when a
    community is configured and afterwards follow what this session has
    committed; they are only touched after the switch accepted the whole
    transaction.
    """

    # Interface-name conventions used when building the SNMP reference tables
    port_name_parser: ClassVar[Callable[[str], int | None] | None] = None
    vlan_name_parser: ClassVar[Callable[[str], int | None] | None] = None
    # Map bit of the first port in an SNMP PortList (whose first port is MSB bit 0)
    PORTLIST_BIT_OFFSET: ClassVar[int] = 0

    def __init__(self, config: SwitchConfig, transport: ShellTransport | None = None) -> None:
        super().__init__(config, transport)
        self.vlan_ports_all = VlanPortMapList()
        self.vlan_ports_untagged = VlanPortMapList()
        self.port_refs: PortRefTable | None = None
        self.vlan_refs: VlanRefTable | None = None

    # ── vendor hooks ───────────────────────────────────────────────────

    @abstractmethod
    def _exchange(self, op: Operation, **params: Any) -> Outcome:
        """Send ``op`` to the switch and judge the reply.

        Raises:
            SwitchError: The exchange itself failed (timeout, dead shell, ...).
        """

    @abstractmethod
    def port_to_bit(self, port: int) -> int:
        """Map a unified port number to its bit in the VLAN port maps.

        Raises:
            PortError: The port does not exist on this model.
        """

    @abstractmethod
    def bit_to_port(self, bit: int) -> int:
        """Inverse of :meth:`port_to_bit`."""

    def connect_switch(self) -> bool:
        """Log in, then load the VLAN port maps when SNMP is configured."""
        if not super().connect_switch():
            return False
        if self.config.snmp_enabled:
            loaded = self.read_vlan_port_maps()
            if not loaded:
                logger.warning(f"[{self.host}] VLAN port maps not loaded: {loaded.diagnostic}")
        return True

    def apply(self, op: Operation, **params: Any) -> Outcome:
        """Run one device operation; I/O errors come back as a failed outcome."""
        if not self.active:
            return Outcome.failure(f"{op.value}: session not active")
        try:
            return self._exchange(op, **params)
        except SwitchError as e:
            return self._io_failure(op, e)

    # ── transaction hooks ──────────────────────────────────────────────

    def _check_ready(self) -> Outcome:
        if not self.active:
            return Outcome.failure("session not active")
        if self.model not in self.MODELS:
            return Outcome.failure(f"model {self.model.value} not handled by {type(self).__name__}")
        if not self.is_alive():
            return Outcome.failure("remote shell not alive")
        return Outcome.success()

    def pre_action(self) -> Outcome:
        ready = self._check_ready()
        if not ready:
            return ready
        return self.apply(Operation.LOCK)

    def post_action(self) -> Outcome:
        return self.apply(Operation.UNLOCK)

    def post_action_with_commit(self) -> Outcome:
        committed = self.apply(Operation.COMMIT)
        released = self.apply(Operation.UNLOCK)
        if not committed:
            return committed if released else committed.with_note(f"unlock failed: {released.diagnostic}")
        return released

    # ── guards ─────────────────────────────────────────────────────────

    def _require_active(self) -> None:
        if not self.active:
            raise PreconditionError(f"session to {self.host} not active")

    def _require_vlan(self, vlan_id: int) -> None:
        if vlan_id == VLAN_NONE:
            raise VLANError("VLAN 0 is not a VLAN")
        if not self.config.min_vlan <= vlan_id <= self.config.max_vlan:
            raise VLANError(f"VLAN {vlan_id} outside {self.config.min_vlan}..{self.config.max_vlan}")

    def _require_port(self, port: int) -> int:
        """Validate ``port`` for a mutation and return its bit."""
        if port == self.config.control_port:
            raise PortError(f"port {port:#x} is the control port")
        if not 0 <= port <= 0xFFFF:
            raise PortError(f"port {port} is not a unified port number")
        return self.port_to_bit(port)

    def _rejected(self, action: str, exc: PreconditionError) -> Outcome:
        logger.debug(f"[{self.host}] {action} rejected: {exc}")
        return Outcome.failure(f"{action}: {exc}")

    # ── mutations ──────────────────────────────────────────────────────

    def create_vlan(self, vlan_id: int) -> Outcome:
        action = f"create VLAN {vlan_id}"
        try:
            self._require_active()
            self._require_vlan(vlan_id)
        except PreconditionError as e:
            return self._rejected(action, e)

        outcome = ProvisioningTransaction(self, action).run(
            lambda: self.apply(Operation.CREATE_VLAN, vlan_id=vlan_id),
        )
        if outcome:
            self.vlan_ports_all.get_or_create(vlan_id)
            self.vlan_ports_untagged.get_or_create(vlan_id)
        return outcome

    def remove_vlan(self, vlan_id: int) -> Outcome:
        action = f"remove VLAN {vlan_id}"
        try:
            self._require_active()
            self._require_vlan(vlan_id)
        except PreconditionError as e:
            return self._rejected(action, e)

        outcome = ProvisioningTransaction(self, action).run(
            lambda: self.apply(Operation.REMOVE_VLAN, vlan_id=vlan_id),
        )
        if outcome:
            self.vlan_ports_all.remove(vlan_id)
            self.vlan_ports_untagged.remove(vlan_id)
        return outcome

    def move_port_to_vlan_as_tagged(self, port: int, vlan_id: int) -> Outcome:
        action = f"add port {port:#x} to VLAN {vlan_id} tagged"
        try:
            self._require_active()
            self._require_vlan(vlan_id)
            bit = self._require_port(port)
        except PreconditionError as e:
            return self._rejected(action, e)

        outcome = ProvisioningTransaction(self, action).run(
            lambda: self.apply(Operation.ADD_VLAN_PORT, port=port, vlan_id=vlan_id, tagged=True),
        )
        if outcome:
            self.vlan_ports_all.get_or_create(vlan_id).set_bit(bit)
        return outcome

    def move_port_to_vlan_as_untagged(self, port: int, vlan_id: int) -> Outcome:
        """Make ``vlan_id`` the port's only untagged VLAN.

        The port is taken out of its current untagged VLAN (unless that is
        the default VLAN or the target) in the same transaction.
        """
        action = f"move port {port:#x} to VLAN {vlan_id} untagged"
        try:
            self._require_active()
            self._require_vlan(vlan_id)
            bit = self._require_port(port)
        except PreconditionError as e:
            return self._rejected(action, e)

        old_vlan = self.get_vlan_by_untagged_port(port)
        steps = []
        if old_vlan > VLAN_DEFAULT and old_vlan != vlan_id:
            steps.append(lambda: self.apply(Operation.DELETE_VLAN_PORT, port=port, vlan_id=old_vlan, tagged=False))
        steps.append(lambda: self.apply(Operation.ADD_VLAN_PORT, port=port, vlan_id=vlan_id, tagged=False))

        outcome = ProvisioningTransaction(self, action).run(*steps)
        if outcome:
            for vpm in self.vlan_ports_untagged:
                if vpm.vid != vlan_id:
                    vpm.reset_bit(bit)
            if old_vlan != vlan_id and old_vlan in self.vlan_ports_all:
                self.vlan_ports_all.get_or_create(old_vlan).reset_bit(bit)
            self.vlan_ports_untagged.get_or_create(vlan_id).set_bit(bit)
            self.vlan_ports_all.get_or_create(vlan_id).set_bit(bit)
        return outcome

    def remove_port_from_vlan(self, port: int, vlan_id: int) -> Outcome:
        action = f"remove port {port:#x} from VLAN {vlan_id}"
        try:
            self._require_active()
            self._require_vlan(vlan_id)
            bit = self._require_port(port)
        except PreconditionError as e:
            return self._rejected(action, e)

        untagged = self.vlan_ports_untagged.get(vlan_id)
        tagged = not (untagged is not None and untagged.has_bit(bit))
        outcome = ProvisioningTransaction(self, action).run(
            lambda: self.apply(Operation.DELETE_VLAN_PORT, port=port, vlan_id=vlan_id, tagged=tagged),
        )
        if outcome:
            for port_maps in (self.vlan_ports_all, self.vlan_ports_untagged):
                vpm = port_maps.get(vlan_id)
                if vpm is not None:
                    vpm.reset_bit(bit)
        return outcome

    def police_input_bandwidth(self, port: int, vlan_id: int, committed_rate: float, burst_size: int = 0) -> Outcome:
        """Rate-limit traffic entering ``port`` in ``vlan_id``. Not supported here."""
        return Outcome.failure(f"input policing not supported on {self.model.value}")

    def limit_output_bandwidth(self, port: int, vlan_id: int, committed_rate: float, burst_size: int = 0) -> Outcome:
        """Shape traffic leaving ``port`` in ``vlan_id``. Not supported here."""
        return Outcome.failure(f"output shaping not supported on {self.model.value}")

    # ── queries over the committed maps ────────────────────────────────

    def _bit_or_none(self, port: int) -> int | None:
        try:
            return self.port_to_bit(port)
        except PortError:
            return None

    def get_port_list_by_vlan(self, vlan_id: int) -> list[int]:
        """Unified ports this session has put into ``vlan_id``, ascending by bit."""
        vpm = self.vlan_ports_all.get(vlan_id)
        if vpm is None:
            return []
        return [self.bit_to_port(bit) for bit in vpm.bits()]

    def has_port_in_vlan(self, port: int, vlan_id: int) -> bool:
        vpm = self.vlan_ports_all.get(vlan_id)
        bit = self._bit_or_none(port)
        return vpm is not None and bit is not None and vpm.has_bit(bit)

    def get_vlan_by_untagged_port(self, port: int) -> int:
        """The VLAN the port is an untagged member of, or 0."""
        bit = self._bit_or_none(port)
        if bit is None:
            return VLAN_NONE
        vlans = self.vlan_ports_untagged.vlans_with_bit(bit)
        # a port read back from the switch may still be listed in the default VLAN
        for vid in vlans:
            if vid > VLAN_DEFAULT:
                return vid
        return vlans[0] if vlans else VLAN_NONE

    def is_vlan_empty(self, vlan_id: int) -> bool:
        vpm = self.vlan_ports_all.get(vlan_id)
        return vpm is None or vpm.is_empty()

    # ── interface-index reference tables ───────────────────────────────

    def rebuild_reference_tables(self, builder: ReferenceTableBuilder | None = None) -> Outcome:
        """Re-walk the switch's interface tables over SNMP.

        Args:
            builder: Walker to use; by default one is built from the
                configured SNMP community.
        """
        if self.port_name_parser is None or self.vlan_name_parser is None:
            return Outcome.failure(f"no interface naming convention known for {self.model.value}")
        builder = builder or self._snmp_builder()
        if builder is None:
            return Outcome.failure("SNMP not configured")

        try:
            self.port_refs = builder.create_port_to_id_ref_table(self.port_name_parser)
            self.vlan_refs = builder.create_vlan_interface_to_id_ref_table(self.vlan_name_parser)
        except SwitchError as e:
            logger.warning(f"[{self.host}] reference table walk failed: {e}")
            return Outcome.failure(f"reference tables: {e}")

        missing = [name for name, table in (("port", self.port_refs), ("vlan", self.vlan_refs)) if table is None]
        if missing:
            return Outcome.failure(f"no {' or '.join(missing)} interfaces found")
        logger.info(f"[{self.host}] reference tables: {len(self.port_refs)} ports, {len(self.vlan_refs)} VLANs")  # type: ignore[arg-type]
        return Outcome.success()

    def convert_port_interface_to_id(self, ref_id: int) -> int:
        return self.port_refs.port_id_for(ref_id) if self.port_refs else 0

    def convert_port_id_to_interface(self, port_id: int) -> int:
        return self.port_refs.ref_id_for_port(port_id) if self.port_refs else 0

    def convert_vlan_interface_to_id(self, ref_id: int) -> int:
        return self.vlan_refs.vlan_id_for(ref_id) if self.vlan_refs else 0

    def convert_vlan_id_to_interface(self, vlan_id: int) -> int:
        return self.vlan_refs.ref_id_for_vlan(vlan_id) if self.vlan_refs else 0

    # ── VLAN port maps read from the switch ────────────────────────────

    def _snmp_builder(self) -> ReferenceTableBuilder | None:
        if not self.config.snmp_enabled:
            return None
        from vlsrctl.idresolve.resolver import ReferenceTableBuilder

        return ReferenceTableBuilder(self.host, self.config.snmp_community or "")

    def _vlan_id_for_index(self, index: int) -> int:
        """VLAN ID of a dot1qVlanStaticTable row; the index itself unless the vendor renumbers."""
        if self.vlan_name_parser is None:
            return index
        return self.convert_vlan_interface_to_id(index)

    def port_map_from_octets(self, vlan_id: int, octets: bytes) -> VlanPortMap:
        """Turn an SNMP PortList into a port map in this vendor's bit numbering."""
        raw = VlanPortMap(vlan_id, bytearray(octets[:MAX_VLAN_PORT_BYTES]).ljust(MAX_VLAN_PORT_BYTES, b"\0"))
        if not self.PORTLIST_BIT_OFFSET:
            return raw
        vpm = VlanPortMap(vlan_id)
        for bit in raw.bits():
            if bit + self.PORTLIST_BIT_OFFSET < MAX_VLAN_PORT_BITS:
                vpm.set_bit(bit + self.PORTLIST_BIT_OFFSET)
        return vpm

    def read_vlan_port_maps(self, builder: ReferenceTableBuilder | None = None) -> Outcome:
        """Replace both VLAN port maps with the switch's static VLAN membership.

        Walks dot1qVlanStaticEgressPorts and dot1qVlanStaticUntaggedPorts.
        Vendors that number their VLAN rows internally need the VLAN
        reference table; it is built first when missing. On any failure the
        current maps are kept.
        """
        builder = builder or self._snmp_builder()
        if builder is None:
            return Outcome.failure("SNMP not configured")
        if self.vlan_name_parser is not None and self.vlan_refs is None:
            refs = self.rebuild_reference_tables(builder)
            if not refs:
                return refs

        try:
            egress = builder.vlan_egress_ports()
            untagged = builder.vlan_untagged_ports()
        except SwitchError as e:
            logger.warning(f"[{self.host}] VLAN port list walk failed: {e}")
            return Outcome.failure(f"VLAN port maps: {e}")

        all_maps, untagged_maps = VlanPortMapList(), VlanPortMapList()
        for rows, port_maps in ((egress, all_maps), (untagged, untagged_maps)):
            for index, octets in rows:
                vlan_id = self._vlan_id_for_index(index)
                if vlan_id == VLAN_NONE:
                    logger.debug(f"[{self.host}] VLAN row {index} has no known VLAN ID, skipped")
                    continue
                port_maps.put(self.port_map_from_octets(vlan_id, octets))

        self.vlan_ports_all, self.vlan_ports_untagged = all_maps, untagged_maps
        logger.info(f"[{self.host}] VLAN port maps loaded for {len(all_maps)} VLANs")
        return Outcome.success()
