"""SCP session adapter over an asyncssh connection.

Each session opens one SSH channel running one remote command. The
reader and writer exist before the command starts; I/O on them waits
until it has, so a data-plane task may be scheduled ahead of the task
that launches the remote command.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

import asyncssh

from scp_transfer.errors import RemoteFailure, StreamIOError

if TYPE_CHECKING:
    from scp_transfer.protocols import ByteReader, ByteWriter

logger = logging.getLogger(__name__)


class _ProcessReader:
    """Remote stdout of the session's command."""

    def __init__(self, session: "AsyncSSHSession") -> None:
        self._session = session

    async def _stdout(self) -> "asyncssh.SSHReader[bytes]":
        process = await self._session.wait_started()
        return process.stdout

    async def read(self, n: int = -1) -> bytes:
        stdout = await self._stdout()
        try:
            return await stdout.read(n)
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"failed to read from remote: {e}") from e

    async def readexactly(self, n: int) -> bytes:
        stdout = await self._stdout()
        try:
            return await stdout.readexactly(n)
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"failed to read from remote: {e}") from e

    async def readline(self) -> bytes:
        stdout = await self._stdout()
        try:
            return await stdout.readline()
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"failed to read from remote: {e}") from e


class _ProcessWriter:
    """Remote stdin of the session's command."""

    def __init__(self, session: "AsyncSSHSession") -> None:
        self._session = session
        self._eof_sent = False

    async def write(self, data: bytes) -> None:
        process = await self._session.wait_started()
        try:
            process.stdin.write(data)
            await process.stdin.drain()
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"failed to write to remote: {e}") from e

    async def close(self) -> None:
        process = self._session.process
        if process is None or self._eof_sent:
            return
        self._eof_sent = True
        try:
            process.stdin.write_eof()
        except (asyncssh.Error, OSError) as e:
            # Channel already torn down by the remote
            logger.debug("Could not send EOF to remote: %s", e)


class AsyncSSHSession:
    """SCPSession implementation running one command over asyncssh.

    Example:
        >>> conn = await asyncssh.connect("host")
        >>> session = AsyncSSHSession(conn)
        >>> await session.start("scp -f /etc/hostname")
        >>> header = await session.reader.readline()
        >>> await session.close()
    """

    def __init__(self, conn: "asyncssh.SSHClientConnection") -> None:
        """Initialize session on an established connection.

        Args:
            conn: Connection the session opens its channel on. The
                session never closes it.
        """
        self._conn = conn
        self._process: asyncssh.SSHClientProcess[bytes] | None = None
        self._command: str | None = None
        self._started = asyncio.Event()
        self._closed = False
        self._reader = _ProcessReader(self)
        self._writer = _ProcessWriter(self)

    @property
    def reader(self) -> "ByteReader":
        """Stream of bytes sent by the remote command."""
        return self._reader

    @property
    def writer(self) -> "ByteWriter":
        """Stream of bytes sent to the remote command."""
        return self._writer

    @property
    def process(self) -> "asyncssh.SSHClientProcess[bytes] | None":
        """The running remote process, None until started."""
        return self._process

    async def wait_started(self) -> "asyncssh.SSHClientProcess[bytes]":
        """Wait until the command has been started.

        Raises:
            StreamIOError: If starting the command failed
        """
        await self._started.wait()
        if self._process is None:
            raise StreamIOError(f"remote command {self._command!r} is not running")
        return self._process

    async def start(self, command: str) -> None:
        """Start a remote command without waiting for it.

        Raises:
            RuntimeError: If this session already ran a command or is closed
            StreamIOError: If the channel cannot be opened
        """
        if self._closed:
            raise RuntimeError("session is closed")
        if self._command is not None:
            raise RuntimeError(f"session already ran {self._command!r}")

        self._command = command
        logger.debug("Starting remote command: %s", command)
        try:
            self._process = await self._conn.create_process(command, encoding=None)
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"cannot start remote command {command!r}: {e}") from e
        finally:
            self._started.set()

    async def wait(self) -> None:
        """Wait for the started command to exit.

        Raises:
            RemoteFailure: If the command exits with a non-zero status.
                The remote stderr is the failure message.
            StreamIOError: If the channel fails while waiting
        """
        process = await self.wait_started()
        try:
            completed = await process.wait(check=False)
        except (asyncssh.Error, OSError) as e:
            raise StreamIOError(f"lost remote command {self._command!r}: {e}") from e

        status = completed.returncode
        if status == 0:
            logger.debug("Remote command exited cleanly: %s", self._command)
            return

        stderr = completed.stderr or b""
        if isinstance(stderr, bytes):
            stderr = stderr.decode("utf-8", errors="replace")
        if status is None:
            message = stderr or f"remote command {self._command!r} exited without a status"
        else:
            message = stderr or f"remote command {self._command!r} exited with status {status}"

        logger.warning(
            "Remote command %s failed (status=%s): %s",
            self._command,
            status,
            message.rstrip("\n"),
        )
        raise RemoteFailure(message, exit_status=status)

    async def run(self, command: str) -> None:
        """Start a remote command and wait for it to exit."""
        await self.start(command)
        await self.wait()

    async def close(self) -> None:
        """Close the channel. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._process is None:
            return
        logger.debug("Closing channel for %s", self._command)
        self._process.close()
        await self._process.wait_closed()
