"""Protocol interfaces for the transfer engine.

The codec and the orchestrator depend only on these narrow stream and
command-execution contracts, not on a specific SSH implementation.

Usage Example:

    from scp_transfer.protocols import SCPSession

    async def my_function(session: SCPSession):
        '''Function depends on protocol, not concrete implementation.'''
        await session.start("scp -f /etc/hostname")
        line = await session.reader.readline()

    # Production adapter over asyncssh
    from scp_transfer.services.session import AsyncSSHSession
    await my_function(AsyncSSHSession(conn))

    # Or an in-memory fake for testing
    await my_function(FakeSession(remote_output=b"..."))
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteReader(Protocol):
    """Protocol for the stream of remote-originated bytes.

    ``asyncio.StreamReader`` satisfies this protocol.
    """

    async def read(self, n: int = -1) -> bytes:
        """Read up to n bytes.

        Returns:
            Bytes read, empty at end of stream
        """
        ...

    async def readexactly(self, n: int) -> bytes:
        """Read exactly n bytes.

        Raises:
            asyncio.IncompleteReadError: If the stream ends first
        """
        ...

    async def readline(self) -> bytes:
        """Read one newline-terminated line.

        Returns:
            The line including its newline; a partial line at end of stream
        """
        ...


@runtime_checkable
class ByteWriter(Protocol):
    """Protocol for the stream of client-originated bytes."""

    async def write(self, data: bytes) -> None:
        """Write data and wait for flow control to allow more."""
        ...

    async def close(self) -> None:
        """Signal end of input to the remote.

        Safe to call more than once.
        """
        ...


@runtime_checkable
class SCPSession(Protocol):
    """Protocol for a session that runs one remote SCP command.

    Example implementation:
        class MySession:
            reader: ByteReader
            writer: ByteWriter

            async def run(self, command: str) -> None:
                await self.start(command)
                await self.wait()

            async def start(self, command: str) -> None:
                # Launch remote command, bind its stdin/stdout
                ...

            async def wait(self) -> None:
                # Raise RemoteFailure on non-zero exit
                ...

            async def close(self) -> None:
                ...
    """

    @property
    def reader(self) -> ByteReader:
        """Stream of bytes sent by the remote command."""
        ...

    @property
    def writer(self) -> ByteWriter:
        """Stream of bytes sent to the remote command."""
        ...

    async def run(self, command: str) -> None:
        """Start a remote command and wait for it to exit.

        Raises:
            RemoteFailure: If the command exits with a non-zero status
            StreamIOError: If the command cannot be started
        """
        ...

    async def start(self, command: str) -> None:
        """Start a remote command without waiting for it.

        Raises:
            StreamIOError: If the command cannot be started
        """
        ...

    async def wait(self) -> None:
        """Wait for the started command to exit.

        Raises:
            RemoteFailure: If the command exits with a non-zero status
        """
        ...

    async def close(self) -> None:
        """Release the session.

        Safe to call more than once, or when no command was started.
        """
        ...


__all__ = [
    "ByteReader",
    "ByteWriter",
    "SCPSession",
]
