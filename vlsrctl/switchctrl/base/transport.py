"""Timeout-bounded interactive text exchange with a remote shell."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from enum import Enum
from types import TracebackType
from typing import Callable, Self

from loguru import logger

from vlsrctl.switchctrl.exceptions import ProtocolError, ReadTimeoutError, TransportError

LINE_LENGTH = 1024
# sized for a full JUNOScript rpc-reply
BUFFER_CAPACITY = LINE_LENGTH * 64

WRITE_TIMEOUT = 5
READ_TIMEOUT = 10
POLL_INTERVAL = 1


class _Expect(Enum):
    SWITCH_PROMPT = "switch prompt"


# Pass as ``pattern`` to read_until() to wait for the vendor's operational prompt.
SWITCH_PROMPT = _Expect.SWITCH_PROMPT

Pattern = str | _Expect


class BaseTransport(ABC):
    """Abstract base class for switch transports."""

    def __init__(self, host: str, username: str, password: str, port: int | None = None):
        self.host = host
        self.username = username
        self.password = password
        self.port = port

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to the switch."""

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection and reap whatever was spawned for it."""

    @abstractmethod
    def is_alive(self) -> bool:
        """Non-blocking check that the remote shell is still there."""

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()


class ShellTransport(BaseTransport):
    """Line-oriented shell channel with write and read-until-pattern primitives.

    Subclasses supply the raw channel through :meth:`_send` and :meth:`_recv`;
    this class owns the reply buffer and the poll loop. One read or write may
    be in flight at a time.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        port: int | None = None,
        buffer_capacity: int = BUFFER_CAPACITY,
    ):
        super().__init__(host, username, password, port)
        self.buffer_capacity = buffer_capacity
        self.prompt_matcher: Callable[[str], bool] | None = None
        self._pending = ""

    @abstractmethod
    def _send(self, data: str) -> int:
        """Write as much of ``data`` as possible, return the number of characters taken."""

    @abstractmethod
    def _recv(self, timeout: float) -> str:
        """Return text that arrives within ``timeout`` seconds, ``""`` if none.

        Raises:
            TransportError: The remote shell closed its output.
        """

    def write(self, text: str, timeout: float = WRITE_TIMEOUT, expect_echo: bool = False) -> int:
        """Write ``text`` to the shell.

        Args:
            text: Text to send, including any line terminator.
            timeout: Seconds allowed for the write (and for the echo).
            expect_echo: Consume the line-editing echo of ``text`` before returning.

        Returns:
            Number of characters written.
        """
        self._ensure_alive()
        deadline = time.monotonic() + timeout
        sent = 0
        while sent < len(text):
            if time.monotonic() > deadline:
                raise TransportError(f"Write to {self.host} incomplete after {timeout}s ({sent}/{len(text)} chars)")
            sent += self._send(text[sent:])
        logger.debug(f"[{self.host}] >>> {text.rstrip()!r}")

        if expect_echo and text.strip():
            try:
                self.read_until(text.strip(), timeout=timeout, poll_interval=min(POLL_INTERVAL, timeout))
            except ReadTimeoutError as e:
                raise TransportError(f"No echo of {text.strip()!r} from {self.host}: {e.output!r}") from e
        return sent

    def read_until(
        self,
        pattern: Pattern,
        pattern2: str | None = None,
        read_all: bool = False,
        timeout: float = READ_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
    ) -> str:
        """Accumulate shell output until ``pattern`` (and then ``pattern2``) appears.

        Args:
            pattern: Literal text, or :data:`SWITCH_PROMPT` for the vendor prompt.
            pattern2: Literal text that must follow ``pattern``.
            read_all: Keep draining until the shell stays quiet for one poll interval.
            timeout: Wall-clock limit for the whole read.
            poll_interval: Longest single wait for more output.

        Returns:
            The text read; without ``read_all`` it ends where the match ends and
            anything after it is kept for the next read.

        Raises:
            ReadTimeoutError: No match within ``timeout``.
            ProtocolError: The text between ``pattern`` and ``pattern2`` outgrew the buffer.
            TransportError: The shell died while waiting.
        """
        self._ensure_alive()
        deadline = time.monotonic() + timeout
        buffer = self._pending
        self._pending = ""

        match_end = self._match(buffer, pattern, pattern2)
        while match_end is None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ReadTimeoutError(
                    f"{self._describe(pattern, pattern2)} not seen from {self.host} within {timeout}s", output=buffer
                )
            if not self.is_alive():
                raise TransportError(f"Remote shell for {self.host} exited while waiting for output")
            chunk = self._recv(min(poll_interval, remaining))
            if chunk:
                self._check_overflow(buffer + chunk, pattern, pattern2)
                buffer = self._append(buffer, chunk)
                match_end = self._match(buffer, pattern, pattern2)

        if read_all:
            while time.monotonic() < deadline and self.is_alive():
                chunk = self._recv(min(poll_interval, max(deadline - time.monotonic(), 0)))
                if not chunk:
                    break
                buffer = self._append(buffer, chunk)
            logger.debug(f"[{self.host}] <<< {buffer!r}")
            return buffer

        self._pending = buffer[match_end:]
        logger.debug(f"[{self.host}] <<< {buffer[:match_end]!r}")
        return buffer[:match_end]

    def discard_pending(self) -> str:
        """Drop text received but not yet returned by a read."""
        pending, self._pending = self._pending, ""
        return pending

    def _match(self, buffer: str, pattern: Pattern, pattern2: str | None) -> int | None:
        """Return the index just past the satisfied match, or None."""
        if pattern is SWITCH_PROMPT:
            if self.prompt_matcher is None:
                raise TransportError("No prompt matcher installed on transport")
            return len(buffer) if self.prompt_matcher(buffer) else None

        idx = buffer.find(pattern)
        if idx < 0:
            return None
        end = idx + len(pattern)
        if pattern2 is None:
            return end
        idx2 = buffer.find(pattern2, end)
        if idx2 < 0:
            return None
        return idx2 + len(pattern2)

    def _check_overflow(self, combined: str, pattern: Pattern, pattern2: str | None) -> None:
        """Fail when trimming would drop the start of a reply still waiting for ``pattern2``."""
        cut = len(combined) - self.buffer_capacity
        if cut <= 0 or pattern2 is None or not isinstance(pattern, str):
            return
        start = combined.find(pattern)
        if 0 <= start < cut:
            logger.warning(f"[{self.host}] reply larger than {self.buffer_capacity} chars, {pattern!r} would be lost")
            raise ProtocolError(
                f"Reply from {self.host} exceeds the {self.buffer_capacity}-char buffer before {pattern2!r}"
            )

    def _append(self, buffer: str, chunk: str) -> str:
        buffer += chunk
        if len(buffer) > self.buffer_capacity:
            logger.debug(f"[{self.host}] reply buffer full, dropping {len(buffer) - self.buffer_capacity} chars")
            buffer = buffer[-self.buffer_capacity :]
        return buffer

    @staticmethod
    def _describe(pattern: Pattern, pattern2: str | None) -> str:
        first = pattern.value if isinstance(pattern, _Expect) else repr(pattern)
        return f"{first} ... {pattern2!r}" if pattern2 else first

    def _ensure_alive(self) -> None:
        if not self.is_alive():
            raise TransportError(f"Not connected to {self.host}. Call connect() first.")
