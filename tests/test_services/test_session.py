"""Tests for the asyncssh session adapter."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from scp_transfer.errors import RemoteFailure, StreamIOError
from scp_transfer.protocols import SCPSession
from scp_transfer.services.session import AsyncSSHSession


def make_process(returncode: int | None = 0, stderr: bytes = b"") -> MagicMock:
    """Create a mock remote process."""
    process = MagicMock()
    process.stdin.write = MagicMock()
    process.stdin.drain = AsyncMock()
    process.stdin.write_eof = MagicMock()
    process.stdout.read = AsyncMock(return_value=b"hello")
    process.stdout.readexactly = AsyncMock(return_value=b"\x00")
    process.stdout.readline = AsyncMock(return_value=b"C0644 5 hello\n")
    process.wait = AsyncMock(return_value=MagicMock(returncode=returncode, stderr=stderr))
    process.wait_closed = AsyncMock()
    return process


@pytest.fixture
def process() -> MagicMock:
    """Remote process that exits cleanly."""
    return make_process()


@pytest.fixture
def conn(process: MagicMock) -> MagicMock:
    """Connection whose channels run the mock process."""
    conn = MagicMock()
    conn.create_process = AsyncMock(return_value=process)
    return conn


class TestAsyncSSHSession:
    """Test AsyncSSHSession."""

    def test_satisfies_protocol(self, conn: MagicMock) -> None:
        """Session implements SCPSession."""
        assert isinstance(AsyncSSHSession(conn), SCPSession)

    @pytest.mark.asyncio
    async def test_start_opens_binary_process(
        self, conn: MagicMock, process: MagicMock
    ) -> None:
        """The command runs without text decoding."""
        session = AsyncSSHSession(conn)

        await session.start("/usr/bin/scp -f /etc/hostname")

        conn.create_process.assert_awaited_once_with(
            "/usr/bin/scp -f /etc/hostname", encoding=None
        )
        assert session.process is process

    @pytest.mark.asyncio
    async def test_streams_use_process(
        self, conn: MagicMock, process: MagicMock
    ) -> None:
        """Reader and writer map onto remote stdout and stdin."""
        session = AsyncSSHSession(conn)
        await session.start("scp -f /x")

        assert await session.reader.readexactly(1) == b"\x00"
        assert await session.reader.readline() == b"C0644 5 hello\n"
        assert await session.reader.read(5) == b"hello"
        await session.writer.write(b"\x00")

        process.stdin.write.assert_called_once_with(b"\x00")
        process.stdin.drain.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_writer_close_sends_eof_once(
        self, conn: MagicMock, process: MagicMock
    ) -> None:
        """Closing the writer half-closes the channel once."""
        session = AsyncSSHSession(conn)
        await session.start("scp -t /x")

        await session.writer.close()
        await session.writer.close()

        process.stdin.write_eof.assert_called_once()

    @pytest.mark.asyncio
    async def test_writer_close_before_start(self, conn: MagicMock) -> None:
        """Closing the writer of an idle session does nothing."""
        await AsyncSSHSession(conn).writer.close()

    @pytest.mark.asyncio
    async def test_read_error_wrapped(self, conn: MagicMock, process: MagicMock) -> None:
        """Transport errors surface as StreamIOError."""
        process.stdout.readexactly = AsyncMock(side_effect=OSError("reset"))
        session = AsyncSSHSession(conn)
        await session.start("scp -f /x")

        with pytest.raises(StreamIOError, match="reset"):
            await session.reader.readexactly(1)

    @pytest.mark.asyncio
    async def test_start_failure(self, conn: MagicMock) -> None:
        """A channel that cannot open is a StreamIOError for every user."""
        conn.create_process = AsyncMock(side_effect=OSError("refused"))
        session = AsyncSSHSession(conn)

        with pytest.raises(StreamIOError, match="refused"):
            await session.start("scp -t /x")
        with pytest.raises(StreamIOError):
            await session.writer.write(b"C0644 1 x\n")

    @pytest.mark.asyncio
    async def test_start_twice(self, conn: MagicMock) -> None:
        """A session runs one command only."""
        session = AsyncSSHSession(conn)
        await session.start("scp -t /x")

        with pytest.raises(RuntimeError, match="already ran"):
            await session.start("scp -t /y")

    @pytest.mark.asyncio
    async def test_wait_clean_exit(self, conn: MagicMock, process: MagicMock) -> None:
        """Exit status zero is success."""
        session = AsyncSSHSession(conn)

        await session.run("scp -t /x")

        process.wait.assert_awaited_once_with(check=False)

    @pytest.mark.asyncio
    async def test_wait_nonzero_exit_uses_stderr(self, conn: MagicMock) -> None:
        """Remote stderr becomes the failure message."""
        conn.create_process = AsyncMock(
            return_value=make_process(1, b"scp: /x: Permission denied\n")
        )
        session = AsyncSSHSession(conn)

        with pytest.raises(RemoteFailure) as exc_info:
            await session.run("scp -t /x")

        assert str(exc_info.value) == "scp: /x: Permission denied\n"
        assert exc_info.value.exit_status == 1

    @pytest.mark.asyncio
    async def test_wait_without_status(self, conn: MagicMock) -> None:
        """A channel closed without an exit status is a failure."""
        conn.create_process = AsyncMock(return_value=make_process(None))
        session = AsyncSSHSession(conn)

        with pytest.raises(RemoteFailure, match="without a status"):
            await session.run("scp -t /x")

    @pytest.mark.asyncio
    async def test_close_idempotent(self, conn: MagicMock, process: MagicMock) -> None:
        """Closing twice closes the channel once."""
        session = AsyncSSHSession(conn)
        await session.start("scp -t /x")

        await session.close()
        await session.close()

        process.close.assert_called_once()
        process.wait_closed.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_closed_session_cannot_start(self, conn: MagicMock) -> None:
        """A closed session refuses new commands."""
        session = AsyncSSHSession(conn)
        await session.close()

        with pytest.raises(RuntimeError, match="closed"):
            await session.start("scp -t /x")
