"""VLSR switch-provisioning control plane.

Logs into Ethernet switches over telnet or SSH and moves ports into and out of
VLANs inside a lock / mutate / commit / unlock transaction (Juniper EX via
JUNOScript, Dell PowerConnect via CLI).
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


# Import vendors to trigger registration
import vlsrctl.switchctrl.vendors  # noqa: F401, E402
from vlsrctl.switchctrl.base.client import BaseSwitchSession  # noqa: E402
from vlsrctl.switchctrl.base.transport import SWITCH_PROMPT, ShellTransport  # noqa: E402
from vlsrctl.switchctrl.exceptions import (  # noqa: E402
    AuthenticationError,
    PortError,
    PreconditionError,
    ProtocolError,
    ReadTimeoutError,
    SSHError,
    SwitchError,
    TransportError,
    VLANError,
)
from vlsrctl.switchctrl.factory import create_session, list_models  # noqa: E402
from vlsrctl.switchctrl.models.outcome import Outcome  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "create_session",
    "list_models",
    "BaseSwitchSession",
    "ShellTransport",
    "SWITCH_PROMPT",
    "Outcome",
    "SwitchError",
    "TransportError",
    "SSHError",
    "AuthenticationError",
    "ReadTimeoutError",
    "ProtocolError",
    "PreconditionError",
    "PortError",
    "VLANError",
]
