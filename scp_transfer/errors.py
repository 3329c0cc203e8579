"""Exception hierarchy for SCP transfers."""


class SCPError(Exception):
    """Base class for all SCP transfer errors."""


class MalformedWireLine(SCPError):
    """A protocol line could not be parsed."""


class ParseError(MalformedWireLine):
    """A numeric field of a protocol line is not valid."""


class InvalidCommand(MalformedWireLine):
    """A Create line does not have exactly three fields."""


class BadPermissions(SCPError):
    """Permission bits outside the 0o777 range."""

    def __init__(self, permissions: int):
        """Initialize bad permissions error.

        Args:
            permissions: The rejected permission value
        """
        self.permissions = permissions
        super().__init__(f"bad permissions {permissions:o} (0{permissions:d})")


class ProtocolViolation(SCPError):
    """The remote sent something the SCP grammar does not allow here."""


class RemoteFailure(SCPError):
    """The remote side reported a failure.

    The remote message is kept verbatim and is the exception text.
    """

    def __init__(self, message: str, exit_status: int | None = None):
        """Initialize remote failure.

        Args:
            message: Message reported by the remote, unmodified
            exit_status: Exit status of the remote command, if known
        """
        self.message = message
        self.exit_status = exit_status
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class StreamIOError(SCPError):
    """Reading or writing a transfer stream failed."""


class DeadlineExceeded(SCPError):
    """The transfer did not finish before its deadline."""


class Cancelled(SCPError):
    """The transfer was cancelled by the caller."""


class ConnectionError(SCPError):
    """Failed to establish the SSH connection."""

    def __init__(self, host_name: str, original_error: Exception):
        """Initialize connection error.

        Args:
            host_name: Name of the SSH host
            original_error: Original exception that caused the failure
        """
        self.host_name = host_name
        self.original_error = original_error
        super().__init__(f"Cannot connect to {host_name}: {original_error}")


__all__ = [
    "BadPermissions",
    "Cancelled",
    "ConnectionError",
    "DeadlineExceeded",
    "InvalidCommand",
    "MalformedWireLine",
    "ParseError",
    "ProtocolViolation",
    "RemoteFailure",
    "SCPError",
    "StreamIOError",
]
