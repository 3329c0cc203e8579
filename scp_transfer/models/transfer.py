"""Transfer result data models."""

from dataclasses import dataclass


@dataclass
class TransferResult:
    """Result of a completed upload."""

    remote_path: str
    filename: str
    bytes_transferred: int = 0
