"""SCP client bound to one SSH connection.

The client owns the connection it opens and never closes one it was
given. Each transfer runs on a fresh session (SSH channel), so
concurrent transfers on one client do not share streams.
"""

import asyncio
import io
import logging
import os
from types import TracebackType
from typing import BinaryIO

import asyncssh

from scp_transfer.codec import parse_permissions
from scp_transfer.config import Settings
from scp_transfer.errors import ConnectionError, StreamIOError
from scp_transfer.models import FileInfo, SSHHost, TransferResult
from scp_transfer.services.session import AsyncSSHSession
from scp_transfer.services.transfer import ProgressCallback, download, upload

logger = logging.getLogger(__name__)


class SCPClient:
    """Upload and download single files over SCP.

    Example:
        >>> host = SSHHost(name="web", hostname="10.0.0.5", user="deploy")
        >>> async with SCPClient(host) as client:
        ...     with open("app.conf", "rb") as f:
        ...         await client.copy_from_file(f, "/etc/app/app.conf")
    """

    def __init__(self, host: SSHHost, settings: Settings | None = None) -> None:
        """Initialize client for a host.

        Args:
            host: SSH host to connect to
            settings: Transfer settings, defaults to Settings.from_env()
        """
        self.host = host
        self.settings = settings or Settings.from_env()
        self._conn: asyncssh.SSHClientConnection | None = None
        self._owns_connection = True

    @classmethod
    def from_connection(
        cls,
        conn: "asyncssh.SSHClientConnection",
        settings: Settings | None = None,
        name: str = "external",
    ) -> "SCPClient":
        """Wrap a connection established by the caller.

        close() leaves this connection open.

        Args:
            conn: Established SSH connection
            settings: Transfer settings, defaults to Settings.from_env()
            name: Host name used in log messages
        """
        client = cls(SSHHost(name=name, hostname=name), settings)
        client._conn = conn
        client._owns_connection = False
        return client

    @property
    def is_connected(self) -> bool:
        """Check if the client has an open connection."""
        return self._conn is not None and not self._conn.is_closed()

    async def connect(self) -> None:
        """Open the SSH connection.

        Raises:
            ConnectionError: If the connection cannot be established
        """
        if self._conn is not None:
            logger.debug("Already connected to %s", self.host.name)
            return

        if self.settings.known_hosts is None:
            logger.warning(
                "SSH host key verification DISABLED for %s. "
                "Set SCP_KNOWN_HOSTS to a valid known_hosts file path.",
                self.host.name,
            )

        logger.info("Opening SSH connection to %s (%s)", self.host.name, self.host.address)
        client_keys = [self.host.identity_file] if self.host.identity_file else None
        try:
            self._conn = await asyncssh.connect(
                self.host.hostname,
                port=self.host.port,
                username=self.host.user,
                known_hosts=self.settings.known_hosts,
                client_keys=client_keys,
                connect_timeout=self.settings.connect_timeout,
            )
        except (asyncssh.Error, OSError) as e:
            logger.error("Connection to %s failed: %s", self.host.name, e)
            raise ConnectionError(self.host.name, e) from e

        self._owns_connection = True
        logger.info("SSH connection established to %s", self.host.name)

    async def close(self) -> None:
        """Close the connection if this client opened it.

        Safe to call more than once, or when never connected.
        """
        conn, self._conn = self._conn, None
        if conn is None:
            return
        if not self._owns_connection:
            logger.debug("Leaving caller-supplied connection to %s open", self.host.name)
            return

        logger.info("Closing SSH connection to %s", self.host.name)
        conn.close()
        await conn.wait_closed()

    async def __aenter__(self) -> "SCPClient":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def _session(self) -> AsyncSSHSession:
        if self._conn is None:
            raise RuntimeError(f"SCPClient for {self.host.name} is not connected")
        return AsyncSSHSession(self._conn)

    def _timeout(self, timeout: float | None) -> float | None:
        return self.settings.transfer_timeout if timeout is None else timeout

    async def copy(
        self,
        source: BinaryIO,
        remote_path: str,
        permissions: int | str,
        size: int,
        *,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> TransferResult:
        """Upload exactly size bytes from source.

        Args:
            source: Local binary file to read from
            remote_path: Destination path on the remote host
            permissions: Mode as int or octal string, e.g. "0644"
            size: Number of bytes to send
            progress: Called with (bytes_sent, size) after each chunk
            cancel_event: Event that aborts the upload
            timeout: Seconds allowed, defaults to settings.transfer_timeout

        Returns:
            TransferResult describing the upload
        """
        mode = parse_permissions(permissions)
        session = self._session()
        try:
            return await upload(
                session,
                source,
                remote_path,
                mode,
                size,
                remote_binary=self.settings.remote_binary,
                timeout=self._timeout(timeout),
                cancel_event=cancel_event,
                progress=progress,
                chunk_size=self.settings.chunk_size,
            )
        finally:
            await session.close()

    async def copy_file(
        self,
        source: BinaryIO,
        remote_path: str,
        permissions: int | str,
        *,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> TransferResult:
        """Upload a source of unknown length.

        The source is read fully into memory to determine its size; use
        copy() or copy_from_file() when the size is known.
        """
        try:
            contents = source.read()
        except OSError as e:
            raise StreamIOError(f"failed to read local source: {e}") from e
        return await self.copy(
            io.BytesIO(contents),
            remote_path,
            permissions,
            len(contents),
            progress=progress,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def copy_from_file(
        self,
        file: BinaryIO,
        remote_path: str,
        permissions: int | str | None = None,
        *,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> TransferResult:
        """Upload an open local file, sized from its file status.

        Args:
            file: Open local file with a file descriptor
            remote_path: Destination path on the remote host
            permissions: Mode to use; defaults to the local file's mode
        """
        try:
            stat = os.fstat(file.fileno())
        except OSError as e:
            raise StreamIOError(f"cannot stat local file: {e}") from e

        mode = stat.st_mode & 0o777 if permissions is None else permissions
        return await self.copy(
            file,
            remote_path,
            mode,
            stat.st_size,
            progress=progress,
            cancel_event=cancel_event,
            timeout=timeout,
        )

    async def copy_from_remote(
        self,
        sink: BinaryIO,
        remote_path: str,
        *,
        progress: ProgressCallback | None = None,
        cancel_event: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> FileInfo:
        """Download remote_path into sink.

        Args:
            sink: Local binary file to write to
            remote_path: Source path on the remote host
            progress: Called with (bytes_received, size) after each chunk
            cancel_event: Event that aborts the download
            timeout: Seconds allowed, defaults to settings.transfer_timeout

        Returns:
            FileInfo reported by the remote
        """
        session = self._session()
        try:
            return await download(
                session,
                sink,
                remote_path,
                remote_binary=self.settings.remote_binary,
                timeout=self._timeout(timeout),
                cancel_event=cancel_event,
                progress=progress,
                chunk_size=self.settings.chunk_size,
            )
        finally:
            await session.close()
