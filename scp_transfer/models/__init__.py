"""Data models for SCP transfers."""

from scp_transfer.models.command import Command
from scp_transfer.models.file_info import FileInfo
from scp_transfer.models.response import Response, ResponseKind
from scp_transfer.models.ssh import SSHHost
from scp_transfer.models.transfer import TransferResult

__all__ = [
    "Command",
    "FileInfo",
    "Response",
    "ResponseKind",
    "SSHHost",
    "TransferResult",
]
