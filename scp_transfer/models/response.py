"""SCP response frame data models."""

from dataclasses import dataclass
from enum import IntEnum


class ResponseKind(IntEnum):
    """Status byte of a response frame."""

    OK = 0
    WARNING = 1
    ERROR = 2


@dataclass(frozen=True)
class Response:
    """A response frame read from the remote.

    The message keeps its trailing newline and is empty for OK.
    """

    kind: ResponseKind
    message: str = ""

    @property
    def is_failure(self) -> bool:
        """Check if the remote reported a warning or an error."""
        return self.kind in (ResponseKind.WARNING, ResponseKind.ERROR)
