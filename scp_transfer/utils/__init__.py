"""Utilities for SCP transfers."""

from scp_transfer.utils.console import ColorfulFormatter, configure_logging
from scp_transfer.utils.shell import quote_path, sink_command, source_command

__all__ = [
    "ColorfulFormatter",
    "configure_logging",
    "quote_path",
    "sink_command",
    "source_command",
]
