"""OID constants and the get-next subtree walk used for ID resolution."""

from __future__ import annotations

from typing import Any, Awaitable, Callable

from loguru import logger

# Optional pysnmp import
try:
    from pysnmp.hlapi.asyncio import (
        CommunityData,
        ContextData,
        ObjectIdentity,
        ObjectType,
        SnmpEngine,
        UdpTransportTarget,
        next_cmd,
    )
    from pysnmp.error import PySnmpError
    from pysnmp.proto.rfc1905 import EndOfMibView, NoSuchInstance, NoSuchObject

    HAS_PYSNMP = True
    SNMP_ERRORS: tuple[type[Exception], ...] = (PySnmpError, OSError)
except ImportError:
    HAS_PYSNMP = False
    SNMP_ERRORS = (OSError,)

# ── OID constants ──────────────────────────────────────────────────────
OID_IF_DESCR = "1.3.6.1.2.1.2.2.1.2"  # IF-MIB::ifDescr
OID_VLAN_STATIC_NAME = "1.3.6.1.2.1.17.7.1.4.3.1.1"  # Q-BRIDGE-MIB::dot1qVlanStaticName
OID_VLAN_EGRESS_PORTS = "1.3.6.1.2.1.17.7.1.4.3.1.2"  # Q-BRIDGE-MIB::dot1qVlanStaticEgressPorts
OID_VLAN_UNTAGGED_PORTS = "1.3.6.1.2.1.17.7.1.4.3.1.4"  # Q-BRIDGE-MIB::dot1qVlanStaticUntaggedPorts

Oid = tuple[int, ...]
VarBind = tuple[Oid, Any]
FetchNext = Callable[[Oid], Awaitable["list[VarBind] | None"]]


def parse_oid(oid: str) -> Oid:
    """``"1.3.6.1"`` -> ``(1, 3, 6, 1)``."""
    return tuple(int(part) for part in oid.strip(".").split("."))


def format_oid(oid: Oid) -> str:
    return ".".join(str(part) for part in oid)


def is_end_of_view(value: Any) -> bool:
    """True for the exception values that end a walk."""
    if value is None:
        return True
    return HAS_PYSNMP and isinstance(value, (EndOfMibView, NoSuchObject, NoSuchInstance))


async def walk_subtree(fetch_next: FetchNext, root: Oid) -> list[tuple[int, Any]]:
    """Walk ``root`` with successive get-next requests.

    Args:
        fetch_next: Issues one get-next for an OID; returns the variable
            bindings of the response, or None on an error response.
        root: Subtree to walk.

    Returns:
        ``(last OID component, value)`` for every binding inside the
        subtree, in the order the agent returned them.
    """
    results: list[tuple[int, Any]] = []
    current = root
    while True:
        var_binds = await fetch_next(current)
        if not var_binds:
            break

        done = False
        for oid, value in var_binds:
            if len(oid) <= len(root) or oid[: len(root)] != root:
                done = True
                break
            if is_end_of_view(value):
                done = True
                break
            # an agent that does not advance would loop forever
            if oid <= current:
                done = True
                break
            results.append((oid[-1], value))
            current = oid
        if done:
            break
    return results


async def snmp_get_next(engine: Any, auth: Any, target: Any, oid: Oid, host: str = "") -> list[VarBind] | None:
    """One get-next request; None on error indication or error status."""
    tag = f" [{host}]" if host else ""
    error_indication, error_status, _, var_binds = await next_cmd(
        engine,
        auth,
        target,
        ContextData(),
        ObjectType(ObjectIdentity(format_oid(oid))),
    )
    if error_indication:
        logger.warning(f"SNMP error{tag} after {format_oid(oid)}: {error_indication}")
        return None
    if error_status:
        logger.warning(f"SNMP error{tag} after {format_oid(oid)}: {error_status.prettyPrint()}")
        return None
    return [(tuple(int(part) for part in var_bind_oid), val) for var_bind_oid, val in var_binds]


async def snmp_walk(host: str, community: str, root: str, port: int = 161) -> list[tuple[int, Any]]:
    """Walk ``root`` on ``host`` over SNMPv2c."""
    engine = SnmpEngine()
    auth = CommunityData(community)
    target = await UdpTransportTarget.create((host, port))

    async def fetch(oid: Oid) -> list[VarBind] | None:
        return await snmp_get_next(engine, auth, target, oid, host=host)

    try:
        return await walk_subtree(fetch, parse_oid(root))
    finally:
        engine.close_dispatcher()
