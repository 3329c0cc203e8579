"""Single-file upload and download over an SCP session.

Upload runs two cooperating tasks on one session:

- data plane: ready ack, Create line, ack, body, NUL terminator, ack
- control plane: the remote ``scp -qt`` receiver, whose exit status
  decides remote-side success

Download runs one sequence against the remote ``scp -f`` sender:
ready ack, header, ack, body, status, ack, remote exit.

Every protocol line is written only after the previous acknowledgment
has been read. Any failure fails the whole call.
"""

import asyncio
import logging
import posixpath
from collections.abc import Callable
from typing import BinaryIO

from scp_transfer.codec import (
    ACK,
    ack,
    encode_command,
    parse_response,
    read_file_header,
)
from scp_transfer.config import DEFAULT_CHUNK_SIZE, DEFAULT_REMOTE_BINARY
from scp_transfer.errors import RemoteFailure, StreamIOError
from scp_transfer.models import FileInfo, TransferResult
from scp_transfer.protocols import ByteReader, ByteWriter, SCPSession
from scp_transfer.services.scope import TransferScope
from scp_transfer.utils.shell import sink_command, source_command

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

# Data plane and control plane
UPLOAD_TASKS = 2


async def _expect_ok(reader: ByteReader, step: str) -> None:
    """Read a response and fail on a remote warning or error."""
    response = await parse_response(reader)
    if response.is_failure:
        logger.warning(
            "Remote rejected %s: %s", step, response.message.rstrip("\n")
        )
        raise RemoteFailure(response.message)


async def _copy_to_remote(
    source: BinaryIO,
    writer: ByteWriter,
    size: int,
    chunk_size: int,
    progress: ProgressCallback | None,
) -> int:
    """Copy exactly size bytes from a local file to the remote."""
    sent = 0
    if progress and size == 0:
        progress(0, 0)

    while sent < size:
        try:
            data = source.read(min(chunk_size, size - sent))
        except OSError as e:
            raise StreamIOError(f"failed to read local source: {e}") from e
        if not data:
            raise StreamIOError(f"local source ended after {sent} of {size} bytes")

        await writer.write(data)
        sent += len(data)
        if progress:
            progress(sent, size)

    return sent


async def _copy_from_remote(
    reader: ByteReader,
    sink: BinaryIO,
    size: int,
    chunk_size: int,
    progress: ProgressCallback | None,
) -> int:
    """Copy exactly size bytes from the remote to a local file.

    Bytes after the body belong to the protocol and are left unread.
    """
    received = 0
    if progress and size == 0:
        progress(0, 0)

    while received < size:
        data = await reader.read(min(chunk_size, size - received))
        if not data:
            raise StreamIOError(
                f"remote stream ended after {received} of {size} bytes"
            )

        try:
            sink.write(data)
        except OSError as e:
            raise StreamIOError(f"failed to write local sink: {e}") from e
        received += len(data)
        if progress:
            progress(received, size)

    return received


async def _send_file(
    session: SCPSession,
    header: bytes,
    source: BinaryIO,
    size: int,
    chunk_size: int,
    progress: ProgressCallback | None,
) -> None:
    """Data plane of an upload. Closes the remote input on every path."""
    writer, reader = session.writer, session.reader
    try:
        await _expect_ok(reader, "receiver start")

        await writer.write(header)
        logger.debug("Sent SCP file header: %r", header)
        await _expect_ok(reader, "file header")

        sent = await _copy_to_remote(source, writer, size, chunk_size, progress)
        await writer.write(ACK)
        logger.debug("Sent %d bytes and terminator", sent)
        await _expect_ok(reader, "file body")
    finally:
        await writer.close()


async def upload(
    session: SCPSession,
    source: BinaryIO,
    remote_path: str,
    permissions: int,
    size: int,
    *,
    remote_binary: str = DEFAULT_REMOTE_BINARY,
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
    progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> TransferResult:
    """Upload exactly size bytes from source to remote_path.

    Args:
        session: Fresh session; it runs the remote receiver
        source: Local binary file positioned at the first byte to send
        remote_path: Destination path on the remote host
        permissions: Mode bits of the remote file, at most 0o777
        size: Number of bytes to send
        remote_binary: Remote scp executable, optionally with a prefix
        timeout: Seconds before DeadlineExceeded, None for no limit
        cancel_event: Event that aborts the upload with Cancelled
        progress: Called with (bytes_sent, size) after each chunk
        chunk_size: Maximum bytes read from source per write

    Returns:
        TransferResult describing the upload

    Raises:
        BadPermissions: If permissions exceed 0o777
        RemoteFailure: If the remote rejects the file or exits non-zero
        StreamIOError: If the source or the session fails
        DeadlineExceeded: If timeout expires
        Cancelled: If cancel_event is set
    """
    filename = posixpath.basename(remote_path.rstrip("/"))
    header = encode_command(permissions, size, filename)
    command = sink_command(remote_binary, remote_path)
    errors: asyncio.Queue[Exception] = asyncio.Queue(maxsize=UPLOAD_TASKS)

    async def data_plane() -> None:
        try:
            await _send_file(session, header, source, size, chunk_size, progress)
        except Exception as e:
            errors.put_nowait(e)
            raise

    async def control_plane() -> None:
        try:
            await session.run(command)
        except Exception as e:
            errors.put_nowait(e)
            raise

    logger.info("Uploading %d bytes to %s (mode=%04o)", size, remote_path, permissions)

    async with TransferScope(timeout, cancel_event):
        try:
            async with asyncio.TaskGroup() as tg:
                tg.create_task(data_plane(), name=f"scp-data:{remote_path}")
                tg.create_task(control_plane(), name=f"scp-control:{remote_path}")
        except ExceptionGroup as eg:
            try:
                first = errors.get_nowait()
            except asyncio.QueueEmpty:
                first = eg.exceptions[0]
            logger.error("Upload to %s failed: %s", remote_path, first)
            raise first from None

    logger.info("Upload completed: %d bytes to %s", size, remote_path)
    return TransferResult(
        remote_path=remote_path,
        filename=filename,
        bytes_transferred=size,
    )


async def download(
    session: SCPSession,
    sink: BinaryIO,
    remote_path: str,
    *,
    remote_binary: str = DEFAULT_REMOTE_BINARY,
    timeout: float | None = None,
    cancel_event: asyncio.Event | None = None,
    progress: ProgressCallback | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FileInfo:
    """Download the file at remote_path into sink.

    Args:
        session: Fresh session; it runs the remote sender
        sink: Local binary file receiving the body
        remote_path: Source path on the remote host
        remote_binary: Remote scp executable, optionally with a prefix
        timeout: Seconds before DeadlineExceeded, None for no limit
        cancel_event: Event that aborts the download with Cancelled
        progress: Called with (bytes_received, size) after each chunk
        chunk_size: Maximum bytes read from the remote per chunk

    Returns:
        FileInfo with the remote mode, size, name and, when sent, times

    Raises:
        RemoteFailure: If the remote reports an error (message verbatim)
            or exits non-zero
        ProtocolViolation: If the header does not follow the protocol
        StreamIOError: If the sink or the session fails
        DeadlineExceeded: If timeout expires
        Cancelled: If cancel_event is set
    """
    command = source_command(remote_binary, remote_path)
    logger.info("Downloading %s", remote_path)

    async with TransferScope(timeout, cancel_event):
        await session.start(command)
        await ack(session.writer)

        info = await read_file_header(session.reader, session.writer)
        await ack(session.writer)

        received = await _copy_from_remote(
            session.reader, sink, info.size, chunk_size, progress
        )
        await _expect_ok(session.reader, "file body")
        await ack(session.writer)
        await session.writer.close()
        await session.wait()

    logger.info("Download completed: %d bytes from %s", received, remote_path)
    return info
