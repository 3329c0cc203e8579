"""Create-line encoding and decoding.

A Create line announces one file::

    C0644 1234 name.txt\n

The mode is four octal digits, the size a decimal byte count.
"""

import re

from scp_transfer.errors import (
    BadPermissions,
    InvalidCommand,
    MalformedWireLine,
    ParseError,
    ProtocolViolation,
)
from scp_transfer.models import Command

MAX_PERMISSIONS = 0o777
# Largest size representable as a signed 64-bit off_t on the remote
MAX_FILE_SIZE = 2**63 - 1

_OCTAL = re.compile(r"[0-7]+")
_INTEGER = re.compile(r"-?[0-9]+")


def parse_permissions(value: int | str) -> int:
    """Normalize permissions given as an int or an octal string.

    Args:
        value: Mode bits, e.g. ``0o644`` or ``"0644"``

    Returns:
        Mode bits as an int

    Raises:
        ParseError: If a string is not valid octal
        BadPermissions: If the mode exceeds 0o777
    """
    if isinstance(value, str):
        if not _OCTAL.fullmatch(value):
            raise ParseError(f"invalid octal permissions {value!r}")
        value = int(value, 8)
    if value < 0 or value > MAX_PERMISSIONS:
        raise BadPermissions(value)
    return value


def parse_size(text: str) -> int:
    """Parse a decimal byte count.

    Raises:
        ParseError: If the text is not a decimal integer
        ProtocolViolation: If the size is negative or exceeds MAX_FILE_SIZE
    """
    if not _INTEGER.fullmatch(text):
        raise ParseError(f"invalid size {text!r}")
    size = int(text)
    check_size(size)
    return size


def check_size(size: int) -> None:
    """Reject sizes outside 0..MAX_FILE_SIZE."""
    if size < 0 or size > MAX_FILE_SIZE:
        raise ProtocolViolation(
            f"size {size} outside the supported range 0..{MAX_FILE_SIZE}"
        )


def encode_command(permissions: int, size: int, filename: str | bytes) -> bytes:
    """Encode a Create line.

    Args:
        permissions: Mode bits, at most 0o777
        size: Number of payload bytes that follow
        filename: Name the remote stores the file under

    Returns:
        The line including its trailing newline

    Raises:
        BadPermissions: If permissions exceed 0o777
        ProtocolViolation: If size is out of range
        MalformedWireLine: If the filename would break line framing
    """
    if permissions < 0 or permissions > MAX_PERMISSIONS:
        raise BadPermissions(permissions)
    check_size(size)

    if isinstance(filename, str):
        filename = filename.encode("utf-8", errors="surrogateescape")
    if not filename or b"\n" in filename or b"\x00" in filename:
        raise MalformedWireLine(f"invalid filename {filename!r}")

    return b"C%04o %d " % (permissions, size) + filename + b"\n"


def decode_command(data: bytes | str) -> Command:
    """Decode a Create line.

    Trailing NUL and newline characters are ignored.

    Raises:
        InvalidCommand: If the line does not have exactly three fields
        ParseError: If the mode or size field is not numeric
        BadPermissions: If the mode exceeds 0o777
        ProtocolViolation: If the size is out of range
    """
    if isinstance(data, bytes):
        text = data.decode("utf-8", errors="surrogateescape")
    else:
        text = data

    parts = text.rstrip("\n\x00").split(" ")
    if len(parts) != 3:
        raise InvalidCommand(f"Command {text!r} is invalid")

    mode, size, filename = parts
    return Command(
        permissions=parse_permissions(mode[1:]),
        size=parse_size(size),
        filename=filename,
    )
