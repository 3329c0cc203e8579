"""Remote SCP command construction."""

import shlex


def quote_path(path: str) -> str:
    """Safely quote a path for shell commands.

    Args:
        path: File system path to quote

    Returns:
        Shell-safe quoted path
    """
    return shlex.quote(path)


def sink_command(remote_binary: str, path: str) -> str:
    """Build the command that receives one file into path.

    remote_binary is used as-is so it may carry a prefix like ``sudo``.
    """
    return f"{remote_binary} -qt {quote_path(path)}"


def source_command(remote_binary: str, path: str) -> str:
    """Build the command that sends the file at path."""
    return f"{remote_binary} -f {quote_path(path)}"
