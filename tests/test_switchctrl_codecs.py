"""Tests for the JUNOScript and PowerConnect CLI codecs."""

import re

import pytest
from lxml import etree

from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.exceptions import ProtocolError
from vlsrctl.switchctrl.models.port import make_unified_port
from vlsrctl.switchctrl.vendors.dell.codec import DellPowerConnectCodec, port_to_name
from vlsrctl.switchctrl.vendors.dell.session import DellPowerConnectSession
from vlsrctl.switchctrl.vendors.juniper.junoscript import (
    JUNOScriptCodec,
    JUNOScriptReplyParser,
    extract_reply,
    interface_name,
    vlan_name,
)

JUNOS = 'xmlns:junos="http://xml.juniper.net/junos/9.2R2/junos"'
OK_REPLY = f"<rpc-reply {JUNOS}>\n</rpc-reply>\n"
COMMIT_OK = (
    f'<rpc-reply {JUNOS}><commit-results><routing-engine junos:style="normal">'
    "<name>fpc0</name><commit-success/></routing-engine></commit-results></rpc-reply>"
)
ERROR_REPLY = (
    f"<rpc-reply {JUNOS}><xnm:error "
    'xmlns="http://xml.juniper.net/xnm/1.1/xnm" xmlns:xnm="http://xml.juniper.net/xnm/1.1/xnm">'
    "<message>\nconfiguration database modified\n</message></xnm:error></rpc-reply>"
)


class TestJUNOScriptNames:
    """Test interface and VLAN naming."""

    def test_vlan_name(self):
        assert vlan_name(100) == "dynamic_vlan_100"
        assert vlan_name(1) == "default"

    def test_interface_name(self):
        assert interface_name(make_unified_port(0, 1, 17)) == "ge-0/1/17"


class TestJUNOScriptCompose:
    """Test request composition."""

    def test_lock_unlock_commit(self):
        codec = JUNOScriptCodec()
        assert codec.compose(Operation.LOCK) == "<rpc><lock-configuration/></rpc>"
        assert codec.compose(Operation.UNLOCK) == "<rpc><unlock-configuration/></rpc>"
        assert codec.compose(Operation.COMMIT) == "<rpc><commit-configuration/></rpc>"

    def test_add_tagged_port(self):
        """Tagged membership is a trunk port-mode with the VLAN as member."""
        codec = JUNOScriptCodec()
        rpc = etree.fromstring(codec.compose(Operation.ADD_VLAN_PORT, port=5, vlan_id=100, tagged=True))
        load = rpc.find("load-configuration")
        assert load.get("action") == "merge"
        iface = load.find("configuration/interfaces/interface")
        assert iface.findtext("name") == "ge-0/0/5"
        assert iface.findtext("unit/name") == "0"
        switching = iface.find("unit/family/ethernet-switching")
        assert switching.findtext("port-mode") == "trunk"
        assert switching.findtext("vlan/members") == "dynamic_vlan_100"

    def test_add_untagged_port(self):
        codec = JUNOScriptCodec()
        rpc = etree.fromstring(codec.compose(Operation.ADD_VLAN_PORT, port=5, vlan_id=100, tagged=False))
        assert rpc.findtext(".//port-mode") == "access"

    def test_delete_port(self):
        """Deleting membership marks the member and sets no port-mode."""
        codec = JUNOScriptCodec()
        rpc = etree.fromstring(codec.compose(Operation.DELETE_VLAN_PORT, port=5, vlan_id=100))
        members = rpc.find(".//vlan/members")
        assert members.get("delete") == "delete"
        assert rpc.find(".//port-mode") is None

    def test_create_and_remove_vlan(self):
        codec = JUNOScriptCodec()
        create = etree.fromstring(codec.compose(Operation.CREATE_VLAN, vlan_id=100))
        vlan = create.find(".//vlans/vlan")
        assert vlan.findtext("name") == "dynamic_vlan_100"
        assert vlan.findtext("vlan-id") == "100"

        remove = etree.fromstring(codec.compose(Operation.REMOVE_VLAN, vlan_id=100))
        vlan = remove.find(".//vlans/vlan")
        assert vlan.get("delete") == "delete"
        assert vlan.find("vlan-id") is None

    def test_request_never_contains_reply_end(self):
        """The echo of a request cannot terminate a reply read."""
        codec = JUNOScriptCodec()
        for op in Operation:
            text = codec.compose(op, port=5, vlan_id=100, tagged=True)
            assert "</rpc-reply>" not in text
            assert "<rpc-reply" not in text


class TestJUNOScriptParse:
    """Test reply verdicts."""

    def test_empty_reply_succeeds_for_lock(self):
        assert JUNOScriptCodec().parse(OK_REPLY, Operation.LOCK)

    def test_commit_requires_commit_success(self):
        """A commit reply without <commit-success/> is a failure."""
        codec = JUNOScriptCodec()
        assert codec.parse(COMMIT_OK, Operation.COMMIT)
        outcome = codec.parse(OK_REPLY, Operation.COMMIT)
        assert not outcome
        assert "commit-success" in outcome.diagnostic

    def test_error_message_becomes_diagnostic(self):
        outcome = JUNOScriptCodec().parse(ERROR_REPLY, Operation.LOCK)
        assert not outcome
        assert outcome.diagnostic == "lock: configuration database modified"

    def test_missing_reply(self):
        """No reply fragment is reported as could not load script."""
        outcome = JUNOScriptCodec().parse("<!-- nothing -->", Operation.LOCK)
        assert not outcome
        assert "could not load script" in outcome.diagnostic

    def test_malformed_reply(self):
        outcome = JUNOScriptCodec().parse("<rpc-reply><broken></rpc-reply>", Operation.ADD_VLAN_PORT)
        assert not outcome
        assert "could not load script" in outcome.diagnostic

    def test_echo_and_noise_around_reply(self):
        """Echoed request and trailing comments do not disturb parsing."""
        buffer = "<rpc><lock-configuration/></rpc>\n" + OK_REPLY + "<!-- keepalive -->\n"
        assert JUNOScriptCodec().parse(buffer, Operation.LOCK)

    def test_last_reply_wins(self):
        buffer = ERROR_REPLY + "\n" + OK_REPLY
        assert JUNOScriptCodec().parse(buffer, Operation.LOCK)

    def test_session_close_inside_reply(self):
        with pytest.raises(ProtocolError):
            extract_reply(f"<rpc-reply {JUNOS}></junoscript></rpc-reply>")

    def test_parser_reports_without_verify(self):
        parser = JUNOScriptReplyParser(OK_REPLY)
        assert not parser.is_successful()
        assert parser.load_and_verify()
        assert parser.is_successful()


PROMPT = DellPowerConnectSession.PROMPT_PATTERN


class TestDellCodec:
    """Test PowerConnect command composition and reply verdicts."""

    def test_port_names(self):
        assert port_to_name(make_unified_port(1, 0, 5)) == "1/g5"
        assert port_to_name(make_unified_port(1, 1, 2)) == "1/xg2"

    def test_transaction_commands(self):
        codec = DellPowerConnectCodec(PROMPT)
        assert codec.commands(Operation.LOCK) == ["configure"]
        assert codec.commands(Operation.UNLOCK) == ["end"]
        assert codec.commands(Operation.COMMIT) == ["copy running-config startup-config"]

    def test_vlan_commands(self):
        codec = DellPowerConnectCodec(PROMPT)
        assert codec.commands(Operation.CREATE_VLAN, vlan_id=200) == ["vlan database", "vlan 200", "exit"]
        assert codec.compose(Operation.REMOVE_VLAN, vlan_id=200) == "vlan database\nno vlan 200\nexit"

    def test_add_untagged_sets_pvid(self):
        codec = DellPowerConnectCodec(PROMPT)
        port = make_unified_port(1, 0, 12)
        assert codec.commands(Operation.ADD_VLAN_PORT, port=port, vlan_id=200, tagged=False) == [
            "interface ethernet 1/g12",
            "switchport mode general",
            "switchport general allowed vlan add 200 untagged",
            "switchport general pvid 200",
            "exit",
        ]

    def test_delete_tagged(self):
        codec = DellPowerConnectCodec(PROMPT)
        port = make_unified_port(1, 1, 1)
        assert codec.commands(Operation.DELETE_VLAN_PORT, port=port, vlan_id=200, tagged=True) == [
            "interface ethernet 1/xg1",
            "switchport general allowed vlan remove 200",
            "exit",
        ]

    def test_parse_success(self):
        codec = DellPowerConnectCodec(PROMPT)
        assert codec.parse("configure\r\nconsole(config)#", Operation.LOCK, command="configure")

    def test_parse_error_prompt(self):
        """A '% ' line is the diagnostic of a failure."""
        codec = DellPowerConnectCodec(PROMPT)
        reply = "vlan 5000\r\n\r\n% Invalid input detected at '^' marker.\r\n\r\nconsole(config-vlan)#"
        outcome = codec.parse(reply, Operation.CREATE_VLAN, command="vlan 5000")
        assert not outcome
        assert "% Invalid input" in outcome.diagnostic

    def test_parse_requires_prompt(self):
        codec = DellPowerConnectCodec(PROMPT)
        outcome = codec.parse("configure\r\nworking...", Operation.LOCK, command="configure")
        assert not outcome
        assert "no prompt" in outcome.diagnostic

    @pytest.mark.parametrize(
        "prompt",
        ["console>", "console#", "console(config)#", "console(config-if-1/g5)#", "pc-6248(config-vlan)#"],
    )
    def test_prompt_pattern(self, prompt):
        assert re.search(PROMPT, f"\r\n{prompt}")
