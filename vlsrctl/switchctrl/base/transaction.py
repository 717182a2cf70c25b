"""Lock -> mutate -> commit -> unlock bracketing of device changes."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Callable

from loguru import logger

from vlsrctl.switchctrl.exceptions import SwitchError
from vlsrctl.switchctrl.models.outcome import Outcome

if TYPE_CHECKING:
    from vlsrctl.switchctrl.base.client import BaseSwitchSession

Step = Callable[[], Outcome]


class TransactionState(Enum):
    """Where a session stands in its current provisioning transaction."""

    IDLE = "idle"
    LOCKED = "locked"
    MUTATED = "mutated"
    COMMITTING = "committing"
    UNLOCKING = "unlocking"


class ProvisioningTransaction:
    """Runs mutation steps while the session holds the configuration lock.

    Every lock acquired by ``pre_action()`` is followed by exactly one of
    ``post_action_with_commit()`` (all steps succeeded) or ``post_action()``
    (a step failed or raised) before :meth:`run` returns or re-raises.

    Usage::

        outcome = ProvisioningTransaction(session, "create VLAN 100").run(
            lambda: session.apply(Operation.CREATE_VLAN, vlan_id=100),
        )
    """

    def __init__(self, session: BaseSwitchSession, description: str):
        self.session = session
        self.description = description

    def run(self, *steps: Step) -> Outcome:
        session = self.session
        locked = session.pre_action()
        if not locked:
            session.transaction_state = TransactionState.IDLE
            logger.warning(f"[{session.host}] {self.description}: lock not acquired: {locked.diagnostic}")
            return locked

        session.transaction_state = TransactionState.LOCKED
        outcome = Outcome.failure("aborted")
        try:
            outcome = self._mutate(steps)
        finally:
            if outcome:
                session.transaction_state = TransactionState.COMMITTING
                outcome = session.post_action_with_commit()
            else:
                session.transaction_state = TransactionState.UNLOCKING
                released = session.post_action()
                if not released:
                    outcome = outcome.with_note(f"unlock failed: {released.diagnostic}")
            session.transaction_state = TransactionState.IDLE

        if outcome:
            logger.info(f"[{session.host}] {self.description}: committed")
        else:
            logger.warning(f"[{session.host}] {self.description}: failed: {outcome.diagnostic}")
        return outcome

    def _mutate(self, steps: tuple[Step, ...]) -> Outcome:
        for step in steps:
            try:
                result = step()
            except SwitchError as e:
                result = Outcome.failure(f"{type(e).__name__}: {e}")
            if not result:
                return result
            self.session.transaction_state = TransactionState.MUTATED
        return Outcome.success()
