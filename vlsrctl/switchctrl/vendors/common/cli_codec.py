"""Plain-CLI codec shared by switches driven through literal command lines."""

from __future__ import annotations

import re
from abc import abstractmethod
from typing import Any

from vlsrctl.switchctrl.base.codec import Operation, ReplyCodec
from vlsrctl.switchctrl.models.outcome import Outcome


class CLICodec(ReplyCodec):
    """Composes command lines and judges replies by the vendor error prompt.

    A reply is a failure if any line starts with :attr:`error_prompt`; it is
    a success once the device's operational prompt follows the command.
    """

    error_prompt: str = "% "

    def __init__(self, prompt_pattern: re.Pattern[str]):
        self.prompt_pattern = prompt_pattern

    @abstractmethod
    def commands(self, op: Operation, **params: Any) -> list[str]:
        """Command lines for ``op``, in the order they must be typed."""

    def compose(self, op: Operation, **params: Any) -> str:
        return "\n".join(self.commands(op, **params))

    def parse(self, reply: str, op: Operation, command: str = "") -> Outcome:
        lines = reply.replace("\r", "").split("\n")
        # the device echoes what was typed before it answers
        if command and lines and command.strip() and command.strip() in lines[0]:
            lines = lines[1:]

        for line in lines:
            if line.lstrip().startswith(self.error_prompt):
                return Outcome.failure(f"{op.value}: {line.strip()}")

        if not self.prompt_pattern.search(reply):
            return Outcome.failure(f"{op.value}: no prompt after command")
        return Outcome.success()
