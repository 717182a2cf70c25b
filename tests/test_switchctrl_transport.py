"""Tests for the ShellTransport read/write primitives."""

import pytest

from vlsrctl.switchctrl.base.transport import BUFFER_CAPACITY, SWITCH_PROMPT
from vlsrctl.switchctrl.exceptions import ProtocolError, ReadTimeoutError, TransportError


class TestReadUntil:
    """Test read_until pattern matching."""

    def test_returns_text_up_to_match(self, make_transport):
        """The reply ends where the pattern ends; the rest is kept."""
        t = make_transport(greeting="banner\r\nlogin: extra")
        assert t.read_until("login:", timeout=1) == "banner\r\nlogin:"
        assert t.discard_pending() == " extra"

    def test_pending_text_is_read_first(self, make_transport):
        """Text left over from one read satisfies the next."""
        t = make_transport(greeting="one\r\ntwo\r\n")
        assert t.read_until("one", timeout=1) == "one"
        assert t.read_until("two", timeout=1) == "\r\ntwo"

    def test_pattern_split_across_reads(self, make_transport):
        """A pattern arriving in pieces is still found."""
        t = make_transport(greeting="xxxx<!-- session start -->", chunk_size=3)
        out = t.read_until("<!-- session start", "-->", timeout=1)
        assert out.endswith("-->")

    def test_second_pattern_must_follow_first(self, make_transport):
        """pattern2 before pattern does not complete the match."""
        t = make_transport(greeting="</rpc-reply> <rpc-reply> ok </rpc-reply>")
        out = t.read_until("<rpc-reply", "</rpc-reply>", timeout=1)
        assert out == "</rpc-reply> <rpc-reply> ok </rpc-reply>"

    def test_second_pattern_missing_times_out(self, make_transport):
        """A reply that never completes raises ReadTimeoutError with the output."""
        t = make_transport(greeting="<rpc-reply> half")
        with pytest.raises(ReadTimeoutError) as exc_info:
            t.read_until("<rpc-reply", "</rpc-reply>", timeout=1, poll_interval=1)
        assert exc_info.value.output == "<rpc-reply> half"

    def test_switch_prompt_uses_prompt_matcher(self, make_transport):
        """SWITCH_PROMPT is answered by the installed prompt matcher."""
        t = make_transport(greeting="Welcome\r\nsw> ")
        assert t.read_until(SWITCH_PROMPT, timeout=1).endswith("sw> ")

    def test_switch_prompt_without_matcher(self, make_transport):
        """SWITCH_PROMPT without a matcher is a transport error."""
        t = make_transport(greeting="sw> ")
        t.prompt_matcher = None
        with pytest.raises(TransportError):
            t.read_until(SWITCH_PROMPT, timeout=1)

    def test_read_all_drains_output(self, make_transport):
        """read_all keeps everything that arrives after the match."""
        t = make_transport(greeting="<rpc-reply>x</rpc-reply>\n<!-- trailing -->", chunk_size=8)
        out = t.read_until("<rpc-reply", "</rpc-reply>", read_all=True, timeout=1)
        assert out.endswith("<!-- trailing -->")
        assert t.discard_pending() == ""

    def test_dead_shell_raises_transport_error(self, make_transport):
        """A shell that exits while we wait is a transport error, not a timeout."""
        t = make_transport()
        t.device.closed = True
        with pytest.raises(TransportError):
            t.read_until("never", timeout=1)

    def test_buffer_is_bounded(self, make_transport):
        """Output beyond the buffer capacity keeps only the newest text."""
        t = make_transport(greeting="a" * (BUFFER_CAPACITY + 100) + "END", chunk_size=4096)
        out = t.read_until("END", timeout=2)
        assert len(out) == BUFFER_CAPACITY
        assert out.endswith("END")

    def test_reply_larger_than_buffer(self, make_transport):
        """A reply whose start marker would be trimmed fails at once instead of timing out."""
        t = make_transport(greeting="<rpc-reply>" + "x" * 200 + "</rpc-reply>", chunk_size=16)
        t.buffer_capacity = 64
        with pytest.raises(ProtocolError, match="exceeds the 64-char buffer"):
            t.read_until("<rpc-reply", "</rpc-reply>", timeout=5, poll_interval=0.1)

    def test_single_pattern_still_slides(self, make_transport):
        t = make_transport(greeting="<rpc-reply>" + "x" * 200 + "END", chunk_size=16)
        t.buffer_capacity = 64
        assert t.read_until("END", timeout=5, poll_interval=0.1).endswith("END")


class TestWrite:
    """Test write."""

    def test_write_sends_text(self, make_transport):
        """write passes the whole text to the channel."""
        t = make_transport()
        assert t.write("show vlan\n", timeout=1) == len("show vlan\n")
        assert t.sent == ["show vlan\n"]

    def test_write_consumes_echo(self, make_transport):
        """expect_echo swallows the echoed command line."""
        t = make_transport()
        t.write("show vlan\n", timeout=1, expect_echo=True)
        assert t.read_until(SWITCH_PROMPT, timeout=1) == "\r\nsw> "

    def test_missing_echo_is_transport_error(self, make_transport):
        """No echo within the write timeout is fatal."""
        t = make_transport(replies={"quiet": ""})
        with pytest.raises(TransportError):
            t.write("quiet\n", timeout=1, expect_echo=True)

    def test_write_when_disconnected(self, make_transport):
        """Writing to a closed transport raises TransportError."""
        t = make_transport()
        t.disconnect()
        with pytest.raises(TransportError):
            t.write("x\n", timeout=1)
