"""Explicitly owned set of live switch sessions, one per host."""

from __future__ import annotations

from collections.abc import Iterator

from loguru import logger

from vlsrctl.switchctrl.base.provisioning import ProvisioningSession
from vlsrctl.switchctrl.exceptions import TransportError
from vlsrctl.switchctrl.factory import create_session
from vlsrctl.switchctrl.models.config import SwitchConfig


class SessionRegistry:
    """Host -> session map owned by whoever drives provisioning.

    Sessions to different switches are independent; callers serialise the
    operations on any one session.

    Usage::

        with SessionRegistry() as registry:
            session = registry.acquire(config)
            session.create_vlan(100)
    """

    def __init__(self) -> None:
        self._sessions: dict[str, ProvisioningSession] = {}

    def acquire(self, config: SwitchConfig) -> ProvisioningSession:
        """Return the connected session for ``config.host``, creating it on first use.

        Raises:
            TransportError: The switch could not be logged into.
        """
        session = self._sessions.get(config.host)
        if session is None:
            session = create_session(config)
            self._sessions[config.host] = session
        if not session.refresh():
            raise TransportError(f"Cannot log into {config.host}")
        return session

    def get(self, host: str) -> ProvisioningSession | None:
        return self._sessions.get(host)

    def release(self, host: str) -> None:
        """Disconnect and forget the session to ``host``."""
        session = self._sessions.pop(host, None)
        if session is not None:
            session.disconnect_switch()

    def close_all(self) -> None:
        for host in list(self._sessions):
            self.release(host)
        logger.debug("All switch sessions closed")

    def __contains__(self, host: object) -> bool:
        return host in self._sessions

    def __iter__(self) -> Iterator[ProvisioningSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def __enter__(self) -> SessionRegistry:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close_all()
