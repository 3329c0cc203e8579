"""SSH-related data models."""

from dataclasses import dataclass


@dataclass
class SSHHost:
    """SSH host to transfer files to and from."""

    name: str
    hostname: str
    user: str = "root"
    port: int = 22
    identity_file: str | None = None

    @property
    def address(self) -> str:
        """Get the user@host:port form used in log messages."""
        return f"{self.user}@{self.hostname}:{self.port}"
