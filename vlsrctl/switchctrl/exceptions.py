"""Exception hierarchy for switch provisioning."""


class SwitchError(Exception):
    """Base exception for all switch provisioning errors."""


class TransportError(SwitchError):
    """Spawn failure, descriptor error or unexpected exit of the remote shell.

    Fatal to the session: the caller has to reconnect.
    """


class SSHError(TransportError):
    """SSH connection or channel failure."""


class AuthenticationError(TransportError):
    """Login rejected by the switch."""


class ReadTimeoutError(SwitchError):
    """Expected output was not seen before the deadline."""

    def __init__(self, message: str, output: str = ""):
        self.output = output
        super().__init__(message)


class ProtocolError(SwitchError):
    """Reply present but malformed or missing its markers."""


class PreconditionError(SwitchError):
    """Request rejected before any device I/O."""


class PortError(PreconditionError):
    """Port number not valid for this switch."""


class VLANError(PreconditionError):
    """VLAN ID not valid for this switch."""
