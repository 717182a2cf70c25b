"""Juniper EX switches (JUNOScript)."""

from vlsrctl.switchctrl.vendors.juniper.junoscript import JUNOScriptCodec, JUNOScriptReplyParser
from vlsrctl.switchctrl.vendors.juniper.session import JuniperEX3200Session

__all__ = [
    "JuniperEX3200Session",
    "JUNOScriptCodec",
    "JUNOScriptReplyParser",
]
