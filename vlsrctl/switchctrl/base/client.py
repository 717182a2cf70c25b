"""Switch session lifecycle: spawn, log in, keep alive, log out."""

from __future__ import annotations

import re
from abc import ABC
from types import TracebackType
from typing import ClassVar, Self

from loguru import logger

from vlsrctl.switchctrl.base.codec import Operation
from vlsrctl.switchctrl.base.transaction import TransactionState
from vlsrctl.switchctrl.base.transport import SWITCH_PROMPT, ShellTransport
from vlsrctl.switchctrl.exceptions import AuthenticationError, ReadTimeoutError, SwitchError, TransportError
from vlsrctl.switchctrl.models.config import SessionType, SwitchConfig, VendorModel
from vlsrctl.switchctrl.models.outcome import Outcome

# Generic "name>" / "name#" prompt at the end of the buffer
DEFAULT_PROMPT_PATTERN = re.compile(r"(?:^|[\r\n])[\w.\-@]+[>#]\s*$")


class BaseSwitchSession(ABC):
    """One interactive session to one managed switch.

    Owns its transport exclusively. ``active`` is only True while the
    transport is connected and the login dialogue has completed.
    """

    MODELS: ClassVar[tuple[VendorModel, ...]] = ()
    PROMPT_PATTERN: ClassVar[re.Pattern[str]] = DEFAULT_PROMPT_PATTERN
    LOGIN_PROMPT: ClassVar[str] = "login:"
    PASSWORD_PROMPT: ClassVar[str] = "assword:"
    LOGOUT_TEXT: ClassVar[str] = "exit\n"
    LINE_TERMINATOR: ClassVar[str] = "\n"

    def __init__(self, config: SwitchConfig, transport: ShellTransport | None = None) -> None:
        self.config = config
        self.host = config.host
        self.active = False
        self.transaction_state = TransactionState.IDLE
        self._transport = transport
        self._injected_transport = transport is not None

    @property
    def transport(self) -> ShellTransport:
        if self._transport is None:
            raise TransportError(f"No transport for {self.host}. Call connect_switch() first.")
        return self._transport

    @property
    def model(self) -> VendorModel:
        return self.config.model

    def _create_transport(self) -> ShellTransport:
        """Build the transport matching the configured session type."""
        from vlsrctl.switchctrl.vendors.common.spawned import SpawnedShellTransport
        from vlsrctl.switchctrl.vendors.common.ssh import ParamikoShellTransport

        cfg = self.config
        if cfg.session_type is SessionType.SSH:
            return ParamikoShellTransport(cfg.host, cfg.username, cfg.password, port=cfg.port)
        return SpawnedShellTransport(cfg.host, cfg.username, cfg.password, port=cfg.port, executable=cfg.telnet_exec)

    # ── lifecycle ──────────────────────────────────────────────────────

    def connect_switch(self) -> bool:
        """Spawn the transport and log in.

        Returns:
            True once the operational prompt was seen; False (session left
            inactive, transport torn down) on any failure.
        """
        if self.active and self.is_alive():
            return True
        if self._transport is None:
            self._transport = self._create_transport()
        self._transport.prompt_matcher = self.is_switch_prompt

        try:
            self._transport.connect()
            self.engage(self.LOGIN_PROMPT)
        except SwitchError as e:
            logger.warning(f"[{self.host}] connect failed: {e}")
            self._teardown()
            return False

        self.active = True
        logger.info(f"[{self.host}] session engaged ({self.model.value}, {self.config.session_type.value})")
        return True

    def engage(self, login_pattern: str) -> None:
        """Run the login dialogue and wait for the operational prompt.

        Raises:
            AuthenticationError: The switch asked for the login again.
            ReadTimeoutError: A prompt did not appear in time.
            TransportError: The shell died during the dialogue.
        """
        cfg = self.config
        t = self.transport
        if cfg.session_type is SessionType.TL1_TELNET:
            return

        if cfg.session_type is SessionType.TELNET:
            t.read_until(login_pattern, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
            t.write(cfg.username + self.LINE_TERMINATOR, timeout=cfg.write_timeout)
            t.read_until(self.PASSWORD_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
            t.write(cfg.password + self.LINE_TERMINATOR, timeout=cfg.write_timeout)

        try:
            t.read_until(SWITCH_PROMPT, timeout=cfg.read_timeout, poll_interval=cfg.poll_interval)
        except ReadTimeoutError as e:
            if login_pattern in e.output or "incorrect" in e.output.lower():
                raise AuthenticationError(f"Login to {self.host} as {cfg.username} rejected") from e
            raise

    def disengage(self, logout_text: str) -> None:
        """Send the logout sequence (best effort) and tear the transport down."""
        if self.active and self.is_alive():
            try:
                self.transport.write(logout_text, timeout=self.config.write_timeout)
            except SwitchError as e:
                logger.debug(f"[{self.host}] logout not delivered: {e}")
        self._teardown()

    def disconnect_switch(self) -> None:
        """Log out and reap the remote shell; no-op when already inactive."""
        if not self.active and not self.is_alive():
            return
        self.disengage(self.LOGOUT_TEXT)
        logger.info(f"[{self.host}] session closed")

    def refresh(self) -> bool:
        """Keep-alive: reconnect if the remote shell has gone away."""
        if self.active and self.is_alive():
            return True
        logger.info(f"[{self.host}] remote shell gone, reconnecting")
        self.disconnect_switch()
        return self.connect_switch()

    def is_alive(self) -> bool:
        return self._transport is not None and self._transport.is_alive()

    def is_switch_prompt(self, buffer: str) -> bool:
        """Whether ``buffer`` ends with the vendor's operational prompt."""
        return bool(self.PROMPT_PATTERN.search(buffer))

    def _teardown(self) -> None:
        if self._transport is not None:
            self._transport.disconnect()
            if not self._injected_transport:
                self._transport = None
        self.active = False
        self.transaction_state = TransactionState.IDLE

    def _io_failure(self, op: Operation, exc: SwitchError) -> Outcome:
        """Map an I/O fault during ``op`` to a failed outcome."""
        if isinstance(exc, TransportError):
            logger.error(f"[{self.host}] {op.value}: transport failure, session closed: {exc}")
            self._teardown()
        else:
            logger.warning(f"[{self.host}] {op.value}: {exc}")
        return Outcome.failure(f"{op.value}: {exc}")

    # ── transaction hooks ──────────────────────────────────────────────

    def pre_action(self) -> Outcome:
        """Acquire exclusive configuration access. No-op at this layer."""
        return Outcome.success()

    def post_action(self) -> Outcome:
        """Release configuration access without committing. No-op at this layer."""
        return Outcome.success()

    def post_action_with_commit(self) -> Outcome:
        """Commit and release configuration access. No-op at this layer."""
        return Outcome.success()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect_switch()
