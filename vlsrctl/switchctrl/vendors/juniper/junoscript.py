"""JUNOScript request composition and reply parsing.

Requests are ``<rpc>`` fragments written into an open ``<junoscript>``
session; each reply arrives as one ``<rpc-reply>`` fragment of the session
document. Replies are parsed with lxml after wrapping them in an element that
declares the ``junos`` and ``xnm`` prefixes, which the device only declares
on the session root.
"""

from __future__ import annotations

from typing import Any

from lxml import etree

from vlsrctl.switchctrl.base.codec import Operation, ReplyCodec
from vlsrctl.switchctrl.exceptions import ProtocolError
from vlsrctl.switchctrl.models.outcome import Outcome
from vlsrctl.switchctrl.models.port import split_unified_port
from vlsrctl.switchctrl.models.vlan import VLAN_DEFAULT

XNM_NS = "http://xml.juniper.net/xnm/1.1/xnm"
JUNOS_NS = "http://xml.juniper.net/junos/*/junos"

REPLY_START = "<rpc-reply"
REPLY_END = "</rpc-reply>"
SESSION_END = "</junoscript>"

CLIENT_NAME = "vlsr"
CLIENT_RELEASE = "9.2R2"
SESSION_OPEN = (
    '<?xml version="1.0" encoding="us-ascii"?> '
    f'<junoscript version="1.0" client="{CLIENT_NAME}" release="{CLIENT_RELEASE}">'
)

_SIMPLE_RPCS = {
    Operation.LOCK: "lock-configuration",
    Operation.UNLOCK: "unlock-configuration",
    Operation.COMMIT: "commit-configuration",
}


def vlan_name(vlan_id: int) -> str:
    """Configuration name of a VLAN created by this daemon."""
    return "default" if vlan_id == VLAN_DEFAULT else f"dynamic_vlan_{vlan_id}"


def interface_name(port: int) -> str:
    """``ge-<module>/<slot>/<port>`` for a unified port number."""
    module, slot, num = split_unified_port(port)
    return f"ge-{module}/{slot}/{num}"


def _sub(parent: etree._Element, tag: str, text: str | None = None, **attrib: str) -> etree._Element:
    el = etree.SubElement(parent, tag, **attrib)
    if text is not None:
        el.text = text
    return el


def _load_configuration(rpc: etree._Element) -> etree._Element:
    load = _sub(rpc, "load-configuration", action="merge", format="xml")
    return _sub(load, "configuration")


def compose_vlan_port(port: int, vlan_id: int, tagged: bool, delete: bool) -> str:
    """Add or delete one port's membership in a VLAN."""
    rpc = etree.Element("rpc")
    configuration = _load_configuration(rpc)
    interface = _sub(_sub(configuration, "interfaces"), "interface")
    _sub(interface, "name", interface_name(port))
    unit = _sub(interface, "unit")
    _sub(unit, "name", "0")
    switching = _sub(_sub(unit, "family"), "ethernet-switching")
    if not delete:
        _sub(switching, "port-mode", "trunk" if tagged else "access")
    members = _sub(_sub(switching, "vlan"), "members", vlan_name(vlan_id))
    if delete:
        members.set("delete", "delete")
    return etree.tostring(rpc, encoding="unicode")


def compose_vlan(vlan_id: int, delete: bool) -> str:
    """Create or delete a VLAN definition."""
    rpc = etree.Element("rpc")
    configuration = _load_configuration(rpc)
    vlan = _sub(_sub(configuration, "vlans"), "vlan")
    _sub(vlan, "name", vlan_name(vlan_id))
    if delete:
        vlan.set("delete", "delete")
    else:
        _sub(vlan, "vlan-id", str(vlan_id))
    return etree.tostring(rpc, encoding="unicode")


def extract_reply(buffer: str) -> str:
    """Cut the last complete ``<rpc-reply>`` fragment out of ``buffer``.

    Raises:
        ProtocolError: No complete reply, or the session closed inside it.
    """
    end = buffer.rfind(REPLY_END)
    if end < 0:
        raise ProtocolError("no </rpc-reply> marker in reply")
    start = buffer.rfind(REPLY_START, 0, end)
    if start < 0:
        raise ProtocolError("no <rpc-reply> start marker in reply")
    if buffer.find(SESSION_END, start, end) >= 0:
        raise ProtocolError("session closed inside reply")
    return buffer[start : end + len(REPLY_END)]


def _localname(el: etree._Element) -> str | None:
    if not isinstance(el.tag, str):
        return None
    return etree.QName(el).localname


class JUNOScriptReplyParser:
    """Loads one reply fragment and reports the device's verdict.

    Usage::

        parser = JUNOScriptReplyParser(buffer, success_tag="commit-success")
        if parser.load_and_verify() and parser.is_successful():
            ...
    """

    def __init__(self, buffer: str, success_tag: str | None = None):
        self.buffer = buffer
        self.success_tag = success_tag
        self.diagnostic = ""
        self._root: etree._Element | None = None

    def load_and_verify(self) -> bool:
        """Parse the reply; False (with diagnostic) if it is not a well-formed reply."""
        try:
            fragment = extract_reply(self.buffer)
            wrapped = f'<reply xmlns:junos="{JUNOS_NS}" xmlns:xnm="{XNM_NS}">{fragment}</reply>'
            self._root = etree.fromstring(wrapped.encode())
        except (ProtocolError, etree.XMLSyntaxError) as e:
            self.diagnostic = f"could not load script: {e}"
            self._root = None
            return False
        return True

    def is_successful(self) -> bool:
        """True when the loaded reply holds no error and, if required, the success element."""
        if self._root is None:
            return False
        errors = [el for el in self._root.iter() if _localname(el) == "error"]
        if errors:
            self.diagnostic = "; ".join(self._error_text(el) for el in errors)
            return False
        if self.success_tag and not any(_localname(el) == self.success_tag for el in self._root.iter()):
            self.diagnostic = f"reply lacks <{self.success_tag}>"
            return False
        return True

    @staticmethod
    def _error_text(error: etree._Element) -> str:
        for child in error.iter():
            if _localname(child) == "message" and child.text and child.text.strip():
                return child.text.strip()
        text = " ".join(t.strip() for t in error.itertext() if t.strip())
        return text or "device reported an error"


class JUNOScriptCodec(ReplyCodec):
    """Scripted-XML codec for Juniper EX switches."""

    def compose(self, op: Operation, **params: Any) -> str:
        if op in _SIMPLE_RPCS:
            rpc = etree.Element("rpc")
            etree.SubElement(rpc, _SIMPLE_RPCS[op])
            return etree.tostring(rpc, encoding="unicode")
        if op in (Operation.ADD_VLAN_PORT, Operation.DELETE_VLAN_PORT):
            return compose_vlan_port(
                params["port"],
                params["vlan_id"],
                params.get("tagged", False),
                delete=op is Operation.DELETE_VLAN_PORT,
            )
        if op in (Operation.CREATE_VLAN, Operation.REMOVE_VLAN):
            return compose_vlan(params["vlan_id"], delete=op is Operation.REMOVE_VLAN)
        raise ValueError(f"Unsupported operation {op}")

    def parse(self, reply: str, op: Operation) -> Outcome:
        parser = JUNOScriptReplyParser(reply, success_tag="commit-success" if op is Operation.COMMIT else None)
        if not parser.load_and_verify() or not parser.is_successful():
            return Outcome.failure(f"{op.value}: {parser.diagnostic}")
        return Outcome.success()
