"""Result value of a provisioning operation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Outcome:
    """Success/failure verdict plus the diagnostic text that explains it.

    Truthy iff the operation succeeded, so callers may write
    ``if session.create_vlan(100): ...``.
    """

    succeeded: bool
    diagnostic: str = ""

    def __bool__(self) -> bool:
        return self.succeeded

    @classmethod
    def success(cls, diagnostic: str = "") -> Outcome:
        return cls(True, diagnostic)

    @classmethod
    def failure(cls, diagnostic: str) -> Outcome:
        return cls(False, diagnostic)

    def with_note(self, note: str) -> Outcome:
        """Return a copy with ``note`` appended to the diagnostic."""
        if not note:
            return self
        diagnostic = f"{self.diagnostic}; {note}" if self.diagnostic else note
        return Outcome(self.succeeded, diagnostic)
