"""Colorful console logging for transfer diagnostics."""

import logging
import re
import sys
from datetime import datetime

from scp_transfer.config import Settings

# ANSI color codes
COLORS = {
    "reset": "\033[0m",
    "bold": "\033[1m",
    "dim": "\033[2m",
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "cyan": "\033[36m",
    "white": "\033[37m",
    "bright_black": "\033[90m",
    "bright_red": "\033[91m",
    "bright_green": "\033[92m",
    "bright_yellow": "\033[93m",
    "bright_blue": "\033[94m",
    "bright_magenta": "\033[95m",
    "bright_cyan": "\033[96m",
    "bg_red": "\033[41m",
}

# Log level colors
LEVEL_COLORS = {
    "DEBUG": COLORS["bright_black"],
    "INFO": COLORS["bright_green"],
    "WARNING": COLORS["bright_yellow"],
    "ERROR": COLORS["bright_red"],
    "CRITICAL": COLORS["bg_red"] + COLORS["white"] + COLORS["bold"],
}

# Component colors for logger names
COMPONENT_COLORS = {
    "scp_transfer.codec": COLORS["bright_black"],
    "scp_transfer.services.transfer": COLORS["bright_cyan"],
    "scp_transfer.services.session": COLORS["bright_magenta"],
    "scp_transfer.services.client": COLORS["bright_blue"],
    "scp_transfer.config": COLORS["green"],
    "default": COLORS["white"],
}

PACKAGE_PREFIX = "scp_transfer."

_BYTES_PATTERN = re.compile(r"(\d+ bytes)")
_SSH_PATTERN = re.compile(r"(\w+@[\w\.\-]+:\d+)")
_SECONDS_PATTERN = re.compile(r"(\d+\.?\d*s)\b")


class ColorfulFormatter(logging.Formatter):
    """Colorful log formatter with component highlighting."""

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize the formatter.

        Args:
            use_colors: Whether to use ANSI colors.
        """
        super().__init__()
        self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        """Apply color to text if colors are enabled."""
        if not self.use_colors:
            return text
        return f"{color}{text}{COLORS['reset']}"

    def _get_component_color(self, name: str) -> str:
        """Get color for a logger name/component."""
        for prefix, color in COMPONENT_COLORS.items():
            if prefix != "default" and name.startswith(prefix):
                return color
        return COMPONENT_COLORS["default"]

    def _format_timestamp(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        return f"{dt.strftime('%H:%M:%S')}.{int(record.msecs):03d}"

    def _format_level(self, record: logging.LogRecord) -> str:
        """Format log level with color and fixed width."""
        level = record.levelname
        color = LEVEL_COLORS.get(level, COLORS["white"])
        return self._colorize(f"{level:<8}", color)

    def _format_component(self, record: logging.LogRecord) -> str:
        """Format component/logger name with color."""
        name = record.name
        if name.startswith(PACKAGE_PREFIX):
            name = name[len(PACKAGE_PREFIX):]
        color = self._get_component_color(record.name)
        return self._colorize(f"{name:<20}", color)

    def _highlight_message(self, message: str) -> str:
        """Highlight byte counts, durations and SSH endpoints."""
        if not self.use_colors:
            return message

        message = _BYTES_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        message = _SECONDS_PATTERN.sub(
            f"{COLORS['bright_yellow']}\\1{COLORS['reset']}", message
        )
        if "@" in message:
            message = _SSH_PATTERN.sub(
                f"{COLORS['bright_magenta']}\\1{COLORS['reset']}", message
            )
        return message

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with colors."""
        timestamp = self._colorize(self._format_timestamp(record), COLORS["dim"])
        level = self._format_level(record)
        component = self._format_component(record)
        sep = self._colorize("|", COLORS["dim"])
        message = self._highlight_message(record.getMessage())

        line = f"{timestamp} {sep} {level} {sep} {component} {sep} {message}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(
    level: str | None = None,
    use_colors: bool | None = None,
) -> logging.Logger:
    """Install a stderr handler on the package logger.

    Colors are disabled when stderr is not a TTY. Calling this again
    only updates the level.

    Args:
        level: Log level name, defaults to SCP_LOG_LEVEL
        use_colors: Whether to use ANSI colors, defaults to SCP_LOG_COLORS

    Returns:
        The configured package logger
    """
    if level is None or use_colors is None:
        settings = Settings.from_env()
        level = settings.log_level if level is None else level
        use_colors = settings.log_colors if use_colors is None else use_colors

    if not sys.stderr.isatty():
        use_colors = False

    package_logger = logging.getLogger("scp_transfer")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        package_logger.addHandler(handler)
        package_logger.propagate = False

    # Channel-level chatter from the SSH library
    logging.getLogger("asyncssh").setLevel(logging.WARNING)

    return package_logger
