"""Response frames and acknowledgments."""

import asyncio
import logging

from scp_transfer.errors import ProtocolViolation, StreamIOError
from scp_transfer.models import Response, ResponseKind
from scp_transfer.protocols import ByteReader, ByteWriter

logger = logging.getLogger(__name__)

ACK = b"\x00"


async def read_status(reader: ByteReader) -> int:
    """Read the single leading byte of a frame."""
    try:
        data = await reader.readexactly(1)
    except asyncio.IncompleteReadError as e:
        raise StreamIOError("connection closed while waiting for a response") from e
    except OSError as e:
        raise StreamIOError(f"failed to read response: {e}") from e
    return data[0]


async def read_line(reader: ByteReader) -> bytes:
    """Read the newline-terminated remainder of a frame."""
    try:
        line = await reader.readline()
    except OSError as e:
        raise StreamIOError(f"failed to read protocol line: {e}") from e
    if not line.endswith(b"\n"):
        raise StreamIOError(f"connection closed in the middle of line {line!r}")
    return line


def decode_message(line: bytes) -> str:
    """Decode a remote message for display, newline included."""
    return line.decode("utf-8", errors="replace")


async def parse_response(reader: ByteReader) -> Response:
    """Read one response frame.

    An OK status is a single byte; nothing further is consumed.
    Warnings and errors carry a newline-terminated message.

    Raises:
        ProtocolViolation: If the status byte is not 0, 1 or 2
        StreamIOError: If the stream ends or fails
    """
    status = await read_status(reader)
    if status == ResponseKind.OK:
        logger.debug("Received SCP OK")
        return Response(ResponseKind.OK)

    message = decode_message(await read_line(reader))
    if status not in (ResponseKind.WARNING, ResponseKind.ERROR):
        raise ProtocolViolation(
            f"unexpected response status {status:#04x}: {message!r}"
        )

    response = Response(ResponseKind(status), message)
    logger.debug("Received SCP %s: %s", response.kind.name, message.rstrip("\n"))
    return response


async def ack(writer: ByteWriter) -> None:
    """Send an acknowledgment.

    Does not wait for the remote's answer; call parse_response for that.
    """
    await writer.write(ACK)
    logger.debug("Sent SCP OK")
