"""SCP Create-line data model."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Command:
    """A Create line: permissions, byte count and filename of one file."""

    permissions: int
    size: int
    filename: str
