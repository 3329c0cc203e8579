"""Transfer settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_REMOTE_BINARY = "/usr/bin/scp"
DEFAULT_CHUNK_SIZE = 32_768


def _default_known_hosts() -> str:
    return str(Path.home() / ".ssh" / "known_hosts")


@dataclass
class Settings:
    """Transfer settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Remote side
    remote_binary: str = field(default=DEFAULT_REMOTE_BINARY)

    # Timeouts (seconds)
    transfer_timeout: float | None = field(default=60.0)
    connect_timeout: int = field(default=30)

    # Data plane
    chunk_size: int = field(default=DEFAULT_CHUNK_SIZE)

    # Security
    known_hosts: str | None = field(default_factory=_default_known_hosts)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from SCP_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            remote_binary=os.getenv("SCP_REMOTE_BINARY", "").strip() or DEFAULT_REMOTE_BINARY,
            transfer_timeout=cls._get_timeout("SCP_TRANSFER_TIMEOUT", 60.0),
            connect_timeout=cls._get_int("SCP_CONNECT_TIMEOUT", 30),
            chunk_size=cls._get_int("SCP_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            known_hosts=cls._get_known_hosts(),
            log_level=os.getenv("SCP_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("SCP_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get positive integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set or invalid

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

        if parsed <= 0:
            logger.warning("%s must be > 0, got %d, using default %d", key, parsed, default)
            return default
        return parsed

    @staticmethod
    def _get_timeout(key: str, default: float) -> float | None:
        """Get timeout in seconds from environment.

        Returns:
            Timeout, None when set to 0 (no deadline), or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            parsed = float(value)
        except ValueError:
            logger.warning("Invalid timeout for %s: %s, using default %s", key, value, default)
            return default

        if parsed == 0:
            return None
        if parsed < 0:
            logger.warning("%s must be >= 0, got %s, using default %s", key, value, default)
            return default
        return parsed

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")

    @staticmethod
    def _get_known_hosts() -> str | None:
        """Get known_hosts path from environment.

        Returns:
            Path to known_hosts, or None if verification is disabled
        """
        value = os.getenv("SCP_KNOWN_HOSTS", "").strip()
        if not value:
            return _default_known_hosts()
        if value.lower() == "none":
            return None
        return str(Path(value).expanduser())
