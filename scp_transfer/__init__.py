"""SCP wire protocol codec and single-file transfer engine."""

from scp_transfer.config import Settings
from scp_transfer.errors import (
    BadPermissions,
    Cancelled,
    ConnectionError,
    DeadlineExceeded,
    InvalidCommand,
    MalformedWireLine,
    ParseError,
    ProtocolViolation,
    RemoteFailure,
    SCPError,
    StreamIOError,
)
from scp_transfer.models import FileInfo, SSHHost, TransferResult
from scp_transfer.services import AsyncSSHSession, SCPClient, download, upload

__version__ = "0.1.0"

__all__ = [
    "AsyncSSHSession",
    "BadPermissions",
    "Cancelled",
    "ConnectionError",
    "DeadlineExceeded",
    "FileInfo",
    "InvalidCommand",
    "MalformedWireLine",
    "ParseError",
    "ProtocolViolation",
    "RemoteFailure",
    "SCPClient",
    "SCPError",
    "SSHHost",
    "Settings",
    "StreamIOError",
    "TransferResult",
    "download",
    "upload",
]
