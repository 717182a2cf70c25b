"""Shell transport over a locally spawned telnet client."""

from __future__ import annotations

import pexpect
from loguru import logger

from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import TransportError
from vlsrctl.switchctrl.models.config import TELNET_EXEC, TELNET_PORT

BUFFER_SIZE = 4096


class SpawnedShellTransport(ShellTransport):
    """Runs ``telnet <host> <port>`` under a pseudo-terminal via pexpect.

    The login dialogue is left to the session; this transport only moves text.
    TL1 devices use the same client against their alternate port.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int = TELNET_PORT,
        executable: str = TELNET_EXEC,
    ):
        super().__init__(host, username, password, port)
        self.executable = executable
        self._child: pexpect.spawn | None = None

    def connect(self) -> None:
        """Spawn the telnet client."""
        argv = [self.host, str(self.port or TELNET_PORT)]
        try:
            self._child = pexpect.spawn(self.executable, argv, encoding="utf-8", codec_errors="replace")
        except pexpect.ExceptionPexpect as e:
            self._child = None
            raise TransportError(f"Cannot spawn {self.executable} for {self.host}: {e}") from e
        logger.info(f"Spawned {self.executable} {' '.join(argv)} (pid {self._child.pid})")

    def disconnect(self) -> None:
        """Terminate and reap the telnet client."""
        if self._child is None:
            return
        try:
            self._child.close(force=True)
        except pexpect.ExceptionPexpect as e:
            logger.warning(f"Could not reap {self.executable} for {self.host}: {e}")
        self._child = None
        self.discard_pending()

    def is_alive(self) -> bool:
        return self._child is not None and self._child.isalive()

    def _send(self, data: str) -> int:
        assert self._child is not None
        try:
            self._child.send(data)
        except OSError as e:
            raise TransportError(f"Write to {self.host} failed: {e}") from e
        return len(data)

    def _recv(self, timeout: float) -> str:
        assert self._child is not None
        try:
            return self._child.read_nonblocking(BUFFER_SIZE, timeout=timeout)
        except pexpect.TIMEOUT:
            return ""
        except pexpect.EOF as e:
            raise TransportError(f"Remote shell for {self.host} closed its output") from e
