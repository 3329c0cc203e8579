"""In-memory streams and sessions standing in for an SSH channel."""

import asyncio


class FakeReader:
    """Byte stream replaying canned remote output."""

    def __init__(self, data: bytes = b"", block_at_end: bool = False) -> None:
        self._buffer = bytearray(data)
        self._block_at_end = block_at_end
        self.cancelled = False
        self.read_sizes: list[int] = []

    async def _wait_forever(self) -> None:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise

    async def read(self, n: int = -1) -> bytes:
        self.read_sizes.append(n)
        await asyncio.sleep(0)
        if not self._buffer and self._block_at_end:
            await self._wait_forever()
        if n < 0:
            n = len(self._buffer)
        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    async def readexactly(self, n: int) -> bytes:
        await asyncio.sleep(0)
        if len(self._buffer) < n and self._block_at_end:
            await self._wait_forever()
        if len(self._buffer) < n:
            partial = bytes(self._buffer)
            self._buffer.clear()
            raise asyncio.IncompleteReadError(partial, n)
        data = bytes(self._buffer[:n])
        del self._buffer[:n]
        return data

    async def readline(self) -> bytes:
        await asyncio.sleep(0)
        index = self._buffer.find(b"\n")
        if index < 0:
            if self._block_at_end:
                await self._wait_forever()
            data = bytes(self._buffer)
            self._buffer.clear()
            return data
        data = bytes(self._buffer[: index + 1])
        del self._buffer[: index + 1]
        return data

    @property
    def remaining(self) -> bytes:
        return bytes(self._buffer)


class FakeWriter:
    """Byte stream recording everything the client sends."""

    def __init__(self) -> None:
        self.chunks: list[bytes] = []
        self.closed = False
        self.close_calls = 0

    @property
    def data(self) -> bytes:
        return b"".join(self.chunks)

    async def write(self, data: bytes) -> None:
        await asyncio.sleep(0)
        self.chunks.append(bytes(data))

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FakeSession:
    """SCPSession whose remote side is scripted."""

    def __init__(
        self,
        remote_output: bytes = b"",
        exit_error: Exception | None = None,
        start_error: Exception | None = None,
        block_at_end: bool = False,
    ) -> None:
        self._reader = FakeReader(remote_output, block_at_end=block_at_end)
        self._writer = FakeWriter()
        self.exit_error = exit_error
        self.start_error = start_error
        self.commands: list[str] = []
        self.waited = False
        self.closed = False

    @property
    def reader(self) -> FakeReader:
        return self._reader

    @property
    def writer(self) -> FakeWriter:
        return self._writer

    async def start(self, command: str) -> None:
        await asyncio.sleep(0)
        if self.start_error is not None:
            raise self.start_error
        self.commands.append(command)

    async def wait(self) -> None:
        await asyncio.sleep(0)
        self.waited = True
        if self.exit_error is not None:
            raise self.exit_error

    async def run(self, command: str) -> None:
        await self.start(command)
        # Remote receiver exits once its input is closed
        while not self._writer.closed:
            await asyncio.sleep(0)
        await self.wait()

    async def close(self) -> None:
        self.closed = True
