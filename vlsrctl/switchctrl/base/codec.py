"""Protocol codec interface: command composition and reply verdicts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from vlsrctl.switchctrl.models.outcome import Outcome


class Operation(Enum):
    """Device operations a codec knows how to compose and verify."""

    LOCK = "lock"
    UNLOCK = "unlock"
    COMMIT = "commit"
    ADD_VLAN_PORT = "add-vlan-port"
    DELETE_VLAN_PORT = "delete-vlan-port"
    CREATE_VLAN = "create-vlan"
    REMOVE_VLAN = "remove-vlan"


class ReplyCodec(ABC):
    """Vendor wire format for provisioning commands and their replies."""

    @abstractmethod
    def compose(self, op: Operation, **params: Any) -> str:
        """Build the command text for ``op``.

        Membership operations take ``port`` (unified), ``vlan_id`` and
        ``tagged``; VLAN operations take ``vlan_id``.
        """

    @abstractmethod
    def parse(self, reply: str, op: Operation) -> Outcome:
        """Turn the device's reply to ``op`` into a verdict with diagnostic."""
