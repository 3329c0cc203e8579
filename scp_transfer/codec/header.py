"""File header framing for downloads.

A sender announces a file with an optional Time line followed by a
mandatory Create line::

    T1610000000 0 1610000001 0\n
    C0644 5 hello\n

Each line is newline-delimited and acknowledged separately. The sender
may instead answer with a warning or error frame.
"""

import logging
import re

from scp_transfer.codec.command import parse_size
from scp_transfer.codec.response import ack, decode_message, read_line, read_status
from scp_transfer.errors import (
    MalformedWireLine,
    ParseError,
    ProtocolViolation,
    RemoteFailure,
)
from scp_transfer.models import FileInfo, ResponseKind
from scp_transfer.protocols import ByteReader, ByteWriter

logger = logging.getLogger(__name__)

CREATE = ord("C")
TIME = ord("T")
DIRECTORY = ord("D")
END_DIRECTORY = ord("E")

# Senders may include setuid, setgid and sticky bits
MAX_FILE_MODE = 0o7777

# Epoch seconds; anything after the first 10 digits is not significant
TIME_DIGITS = 10

_DIGITS = re.compile(r"[0-9]+")
_OCTAL = re.compile(r"[0-7]+")


def _line_text(line: bytes | str) -> str:
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="surrogateescape")
    return line.replace("\n", "")


def parse_file_info_line(line: bytes | str) -> tuple[int, int, str]:
    """Parse the body of a Create line (the part after the ``C`` tag).

    The filename is everything after the second space, so names
    containing spaces are kept whole.

    Returns:
        Tuple of (permissions, size, filename)

    Raises:
        ProtocolViolation: If fewer than three fields are present
        ParseError: If the mode or size is not numeric
    """
    text = _line_text(line)
    parts = text.split(" ", 2)
    if len(parts) < 3:
        raise ProtocolViolation(f"unable to parse Create line {text!r}")

    mode, size, filename = parts
    if not _OCTAL.fullmatch(mode):
        raise ParseError(f"invalid octal permissions {mode!r}")
    permissions = int(mode, 8)
    if permissions > MAX_FILE_MODE:
        raise ProtocolViolation(f"file mode {mode} out of range")
    return permissions, parse_size(size), filename


def parse_time_line(line: bytes | str) -> tuple[int, int]:
    """Parse the body of a Time line (the part after the ``T`` tag).

    Field 0 is the modification time, field 2 the access time.

    Returns:
        Tuple of (atime, mtime)

    Raises:
        MalformedWireLine: If the line has fewer than three fields or a
            timestamp is not numeric
    """
    text = _line_text(line)
    parts = text.split(" ")
    if len(parts) < 3:
        raise MalformedWireLine(f"unable to parse Time line {text!r}")

    mtime = parts[0][:TIME_DIGITS]
    atime = parts[2][:TIME_DIGITS]
    if not _DIGITS.fullmatch(mtime):
        raise MalformedWireLine(f"unable to parse mtime component of {text!r}")
    if not _DIGITS.fullmatch(atime):
        raise MalformedWireLine(f"unable to parse atime component of {text!r}")
    return int(atime), int(mtime)


async def read_file_header(reader: ByteReader, writer: ByteWriter) -> FileInfo:
    """Read the header announcing one file.

    A Time line is acknowledged before the Create line is read. The
    Create line itself is not acknowledged here.

    Returns:
        FileInfo merged from the Time and Create lines

    Raises:
        RemoteFailure: If the sender answered with a warning or error
        ProtocolViolation: If the header does not follow the grammar
    """
    info = FileInfo()
    status = await read_status(reader)

    if status == TIME:
        atime, mtime = parse_time_line(await read_line(reader))
        info.update(FileInfo(atime=atime, mtime=mtime))
        logger.debug("Received SCP time header (mtime=%d, atime=%d)", mtime, atime)
        await ack(writer)
        status = await read_status(reader)
        if status == TIME:
            raise ProtocolViolation("Time line must be followed by a Create line")

    if status == CREATE:
        permissions, size, filename = parse_file_info_line(await read_line(reader))
        info.update(FileInfo(permissions=permissions, size=size, filename=filename))
        logger.debug(
            "Received SCP file header (mode=%04o, size=%d, name=%s)",
            permissions,
            size,
            filename,
        )
        return info

    if status in (ResponseKind.WARNING, ResponseKind.ERROR):
        message = decode_message(await read_line(reader))
        logger.debug("Remote refused to send file: %s", message.rstrip("\n"))
        raise RemoteFailure(message)

    if status == ResponseKind.OK:
        raise ProtocolViolation("expected a file header, got a bare acknowledgment")

    if status in (DIRECTORY, END_DIRECTORY):
        raise ProtocolViolation("directory transfers are not supported")

    raise ProtocolViolation(
        f"message does not follow scp protocol: got tag {status:#04x}, "
        "expected C<mode> <length> <filename> or T<mtime> 0 <atime> 0"
    )
