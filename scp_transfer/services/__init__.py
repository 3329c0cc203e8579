"""Transfer services for SCP."""

from scp_transfer.services.client import SCPClient
from scp_transfer.services.scope import TransferScope
from scp_transfer.services.session import AsyncSSHSession
from scp_transfer.services.transfer import download, upload

__all__ = [
    "AsyncSSHSession",
    "SCPClient",
    "TransferScope",
    "download",
    "upload",
]
