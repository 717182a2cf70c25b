"""Shared fixtures for the vlsrctl test suite.

The simulated switches below answer typed text the way the real CLIs do, so
sessions run their real login dialogue, poll loop, codec and transaction
code against them.
"""

from __future__ import annotations

import time

import pytest
from lxml import etree

from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import TransportError
from vlsrctl.switchctrl.models.config import SwitchConfig, VendorModel

# ── scripted transport ────────────────────────────────────────────────


class FakeDevice:
    """Line-oriented device model; subclasses implement :meth:`handle_line`."""

    greeting = ""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.lines: list[str] = []
        self.closed = False
        self._partial = ""

    def feed(self, data: str) -> str:
        """Consume typed text, return what the device prints in response."""
        self._partial += data
        out = []
        while "\n" in self._partial and not self.closed:
            line, self._partial = self._partial.split("\n", 1)
            line = line.rstrip("\r")
            self.lines.append(line)
            out.append(self.handle_line(line))
        return "".join(out)

    def handle_line(self, line: str) -> str:
        raise NotImplementedError


class ScriptedTransport(ShellTransport):
    """In-memory ShellTransport wired to a :class:`FakeDevice`."""

    def __init__(self, device: FakeDevice, host: str = "switch", chunk_size: int | None = None):
        super().__init__(host, "", "")
        self.device = device
        self.chunk_size = chunk_size
        self.connected = False
        self.connects = 0
        self.disconnects = 0
        self.sent: list[str] = []
        self._outbox = ""

    def push(self, text: str) -> None:
        """Queue unsolicited device output."""
        self._outbox += text

    def connect(self) -> None:
        self.device.reset()
        self.connected = True
        self.connects += 1
        self._outbox = self.device.greeting

    def disconnect(self) -> None:
        if self.connected:
            self.disconnects += 1
        self.connected = False
        self.discard_pending()

    def is_alive(self) -> bool:
        return self.connected and not (self.device.closed and not self._outbox)

    def _send(self, data: str) -> int:
        self.sent.append(data)
        self._outbox += self.device.feed(data)
        return len(data)

    def _recv(self, timeout: float) -> str:
        if not self._outbox:
            if self.device.closed:
                raise TransportError("remote closed")
            time.sleep(min(timeout, 0.01))
            return ""
        size = self.chunk_size or len(self._outbox)
        out, self._outbox = self._outbox[:size], self._outbox[size:]
        return out


# ── simulated Juniper EX3200 ──────────────────────────────────────────

JUNOS_NS = "http://xml.juniper.net/junos/9.2R2/junos"
XNM_NS = "http://xml.juniper.net/xnm/1.1/xnm"
REPLY_OPEN = f'<rpc-reply xmlns:junos="{JUNOS_NS}">'


def junos_error_reply(message: str) -> str:
    return (
        f"{REPLY_OPEN}\n"
        f'<xnm:error xmlns="{XNM_NS}" xmlns:xnm="{XNM_NS}">\n'
        f"<source-daemon>mgd</source-daemon>\n<message>\n{message}\n</message>\n"
        "</xnm:error>\n</rpc-reply>\n"
    )


class FakeJuniperDevice(FakeDevice):
    """JUNOS CLI login followed by a JUNOScript session."""

    greeting = "\r\nex3200 (ttyp0)\r\n\r\nlogin: "
    prompt = "vlsr@ex3200> "

    def __init__(self, username: str = "vlsr", password: str = "secret") -> None:
        self.username = username
        self.password = password
        self.fail_rpcs: dict[str, str] = {}
        self.drop_on: set[str] = set()
        super().__init__()

    def reset(self) -> None:
        super().reset()
        self.state = "login"
        self.rpcs: list[str] = []
        self.loads: list[etree._Element] = []
        self._user = ""

    def handle_line(self, line: str) -> str:
        if self.state == "login":
            self._user = line
            self.state = "password"
            return f"{line}\r\nPassword:"
        if self.state == "password":
            if self._user != self.username or line != self.password:
                self.state = "login"
                return "\r\nLogin incorrect\r\nlogin: "
            self.state = "cli"
            return f"\r\n--- JUNOS 9.2R2.15 built 2008-10-03 19:36:17 UTC\r\n{self.prompt}"
        if self.state == "cli":
            if line.strip() == "junoscript":
                self.state = "xml"
                return (
                    f"{line}\r\n"
                    '<?xml version="1.0" encoding="us-ascii"?>\n'
                    f'<junoscript xmlns="{XNM_NS}" xmlns:junos="{JUNOS_NS}" os="JUNOS" '
                    'release="9.2R2.15" hostname="ex3200" version="1.0">\n'
                    "<!-- session start at 2009-06-01 12:00:00 UTC -->\n"
                )
            return f"{line}\r\n{self.prompt}"
        return self._handle_xml(line.strip())

    def _handle_xml(self, line: str) -> str:
        if not line:
            return ""
        if line.startswith("<?xml"):
            return "<!-- user vlsr, class j-super-user -->\n"
        if line.startswith("</junoscript>"):
            self.closed = True
            return "</junoscript>\n"

        rpc = etree.fromstring(line)
        name = rpc[0].tag
        self.rpcs.append(name)
        if name == "load-configuration":
            self.loads.append(rpc[0])
        if name in self.drop_on:
            self.closed = True
            return ""
        if name in self.fail_rpcs:
            return junos_error_reply(self.fail_rpcs[name])
        if name == "commit-configuration":
            return (
                f"{REPLY_OPEN}\n<commit-results>\n<routing-engine junos:style=\"normal\">\n"
                "<name>fpc0</name>\n<commit-success/>\n</routing-engine>\n</commit-results>\n</rpc-reply>\n"
            )
        if name == "load-configuration":
            return f"{REPLY_OPEN}\n<load-configuration-results>\n<load-success/>\n</load-configuration-results>\n</rpc-reply>\n"
        return f"{REPLY_OPEN}\n</rpc-reply>\n"


# ── simulated Dell PowerConnect ───────────────────────────────────────


class FakeDellDevice(FakeDevice):
    """PowerConnect CLI with configure / interface / vlan database modes."""

    greeting = "\r\n\r\nUser Name:"
    hostname = "console"

    def __init__(self, username: str = "admin", password: str = "secret", enable_password: str | None = None):
        self.username = username
        self.password = password
        self.enable_password = enable_password
        self.fail_commands: set[str] = set()
        super().__init__()

    def reset(self) -> None:
        super().reset()
        self.state = "login"
        self.modes: list[str] = []
        self.commands: list[str] = []
        self._user = ""

    @property
    def prompt(self) -> str:
        if self.state == "user":
            return f"{self.hostname}>"
        mode = f"({self.modes[-1]})" if self.modes else ""
        return f"{self.hostname}{mode}#"

    def handle_line(self, line: str) -> str:
        if self.state == "login":
            self._user = line
            self.state = "password"
            return f"{line}\r\nPassword:"
        if self.state == "password":
            if self._user != self.username or line != self.password:
                self.state = "login"
                return "\r\n% Authentication failed.\r\n\r\nUser Name:"
            self.state = "user"
            return f"\r\n\r\n{self.prompt}"
        if self.state == "enable-password":
            self.state = "exec" if line == self.enable_password else "user"
            return f"\r\n{self.prompt}"
        if self.state == "confirm":
            self.state = "exec"
            if line.strip().lower() == "y":
                return f"{line}\r\n\r\nConfiguration Saved!\r\n{self.prompt}"
            return f"{line}\r\n{self.prompt}"

        command = line.strip()
        echo = f"{line}\r\n"
        if self.state == "user":
            if command == "enable":
                if self.enable_password:
                    self.state = "enable-password"
                    return f"{echo}Password:"
                self.state = "exec"
            return f"{echo}{self.prompt}"

        self.commands.append(command)
        if any(command.startswith(bad) for bad in self.fail_commands):
            return f"{echo}\r\n% Invalid input detected at '^' marker.\r\n\r\n{self.prompt}"
        if command == "configure":
            self.modes = ["config"]
        elif command == "end":
            self.modes = []
        elif command == "exit":
            if self.modes:
                self.modes.pop()
        elif command.startswith("interface ethernet "):
            self.modes.append(f"config-if-{command.split()[-1]}")
        elif command == "vlan database":
            self.modes.append("config-vlan")
        elif command == "copy running-config startup-config":
            if self.modes:
                return f"{echo}\r\n% Invalid input detected at '^' marker.\r\n\r\n{self.prompt}"
            self.state = "confirm"
            return (
                f"{echo}\r\nThis operation may take a few minutes.\r\n"
                "Management interfaces will not be available during this time.\r\n\r\n"
                "Are you sure you want to save? (y/n) "
            )
        return f"{echo}{self.prompt}"


# ── configs & sessions ────────────────────────────────────────────────


@pytest.fixture()
def juniper_config():
    """SwitchConfig for the simulated EX3200 with short timeouts."""
    return SwitchConfig(
        host="ex3200",
        model=VendorModel.JUNIPER_EX3200,
        username="vlsr",
        password="secret",
        read_timeout=1,
        write_timeout=1,
        poll_interval=1,
    )


@pytest.fixture()
def dell_config():
    """SwitchConfig for the simulated PowerConnect 6248 with short timeouts."""
    return SwitchConfig(
        host="pc6248",
        model=VendorModel.POWERCONNECT_6248,
        username="admin",
        password="secret",
        read_timeout=1,
        write_timeout=1,
        poll_interval=1,
    )


@pytest.fixture()
def juniper_device():
    return FakeJuniperDevice()


@pytest.fixture()
def dell_device():
    return FakeDellDevice()


@pytest.fixture()
def juniper_transport(juniper_device):
    return ScriptedTransport(juniper_device, host="ex3200")


@pytest.fixture()
def dell_transport(dell_device):
    return ScriptedTransport(dell_device, host="pc6248")


@pytest.fixture()
def juniper_session(juniper_config, juniper_transport):
    """Connected JuniperEX3200Session talking to the simulated switch."""
    from vlsrctl.switchctrl.factory import create_session

    session = create_session(juniper_config, transport=juniper_transport)
    assert session.connect_switch()
    yield session
    session.disconnect_switch()


@pytest.fixture()
def dell_session(dell_config, dell_transport):
    """Connected DellPowerConnectSession talking to the simulated switch."""
    from vlsrctl.switchctrl.factory import create_session

    session = create_session(dell_config, transport=dell_transport)
    assert session.connect_switch()
    yield session
    session.disconnect_switch()


# ── generic scripted shell ────────────────────────────────────────────


class CannedDevice(FakeDevice):
    """Answers each typed line from a table; unknown lines get echo + prompt."""

    def __init__(self, replies: dict[str, str] | None = None, greeting: str = "", prompt: str = "\r\nsw> "):
        self.replies = replies or {}
        self.greeting = greeting
        self.prompt = prompt
        super().__init__()

    def handle_line(self, line: str) -> str:
        if line in self.replies:
            return self.replies[line]
        return f"{line}{self.prompt}"


@pytest.fixture()
def make_transport():
    """Factory fixture: connected ScriptedTransport over a CannedDevice."""

    def _make(replies=None, greeting="", chunk_size=None, prompt="\r\nsw> "):
        transport = ScriptedTransport(CannedDevice(replies, greeting, prompt), chunk_size=chunk_size)
        transport.prompt_matcher = lambda buf: buf.rstrip().endswith("sw>")
        transport.connect()
        return transport

    return _make
