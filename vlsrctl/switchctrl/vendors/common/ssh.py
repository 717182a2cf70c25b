"""Shell transport over a paramiko interactive SSH channel."""

from __future__ import annotations

import time

import paramiko
from loguru import logger

from vlsrctl.switchctrl.base.transport import ShellTransport
from vlsrctl.switchctrl.exceptions import AuthenticationError, SSHError
from vlsrctl.switchctrl.models.config import SSH_PORT

CONNECT_TIMEOUT = 10
BUFFER_SIZE = 65535
READ_DELAY = 0.1
LINE_WIDTH = 200


class ParamikoShellTransport(ShellTransport):
    """SSH transport using a paramiko interactive shell.

    Authentication happens while connecting, so the session skips the
    username/password dialogue and only waits for the prompt.
    """

    def __init__(self, host: str, username: str, password: str, port: int = SSH_PORT):
        super().__init__(host, username, password, port)
        self._client: paramiko.SSHClient | None = None
        self._shell: paramiko.Channel | None = None

    def connect(self) -> None:
        """Establish SSH connection and open interactive shell."""
        self._client = paramiko.SSHClient()
        self._client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            self._client.connect(
                hostname=self.host,
                port=self.port or SSH_PORT,
                username=self.username,
                password=self.password,
                look_for_keys=False,
                allow_agent=False,
                timeout=CONNECT_TIMEOUT,
            )
            self._shell = self._client.invoke_shell(width=LINE_WIDTH)
        except paramiko.AuthenticationException as e:
            self.disconnect()
            raise AuthenticationError(f"SSH authentication to {self.host} failed: {e}") from e
        except (paramiko.SSHException, OSError) as e:
            self.disconnect()
            raise SSHError(f"SSH connection to {self.host} failed: {e}") from e

        logger.info(f"SSH connected to {self.host}:{self.port}")

    def disconnect(self) -> None:
        """Close SSH shell and connection."""
        if self._shell is not None:
            self._shell.close()
            self._shell = None
        if self._client is not None:
            self._client.close()
            self._client = None
        self.discard_pending()

    def is_alive(self) -> bool:
        """Check if SSH connection and shell are active."""
        if self._client is None or self._shell is None:
            return False
        transport = self._client.get_transport()
        return transport is not None and transport.is_active() and not self._shell.closed

    def _send(self, data: str) -> int:
        assert self._shell is not None
        try:
            sent = self._shell.send(data.encode())
        except (paramiko.SSHException, OSError) as e:
            raise SSHError(f"Write to {self.host} failed: {e}") from e
        # send() counts bytes; the command text is plain ASCII
        return sent

    def _recv(self, timeout: float) -> str:
        assert self._shell is not None
        deadline = time.monotonic() + timeout
        while True:
            if self._shell.recv_ready():
                data = self._shell.recv(BUFFER_SIZE)
                if not data:
                    raise SSHError(f"SSH channel to {self.host} closed")
                return data.decode("utf-8", errors="replace")
            if self._shell.closed or self._shell.exit_status_ready():
                raise SSHError(f"Remote shell on {self.host} exited")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return ""
            time.sleep(min(READ_DELAY, remaining))
