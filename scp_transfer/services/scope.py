"""Deadline and cancellation scope for a single transfer."""

import asyncio
import logging
from types import TracebackType

from scp_transfer.errors import Cancelled, DeadlineExceeded

logger = logging.getLogger(__name__)


class TransferScope:
    """Bound a transfer by a timeout and an optional cancel event.

    Expiry and cancellation both cancel the task running the scope, so
    pending stream reads and writes, and any task group opened inside
    the scope, are interrupted rather than abandoned.

    Example:
        >>> stop = asyncio.Event()
        >>> async with TransferScope(timeout=30, cancel_event=stop):
        ...     await copy_body()
    """

    def __init__(
        self,
        timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        """Initialize the scope.

        Args:
            timeout: Seconds allowed for the scope body, None for no limit.
                Zero or negative values are already expired.
            cancel_event: Event that cancels the scope body when set
        """
        self.timeout = timeout
        self.cancel_event = cancel_event
        self._task: asyncio.Task[object] | None = None
        self._deadline: asyncio.Timeout | None = None
        self._watcher: asyncio.Task[None] | None = None
        self._cancel_requested = False

    async def __aenter__(self) -> "TransferScope":
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise Cancelled("transfer cancelled before it started")
        if self.timeout is not None and self.timeout <= 0:
            raise DeadlineExceeded("deadline expired before the transfer started")

        task = asyncio.current_task()
        if task is None:
            raise RuntimeError("TransferScope must be used inside a task")
        self._task = task

        self._deadline = asyncio.timeout(self.timeout)
        await self._deadline.__aenter__()

        if self.cancel_event is not None:
            self._watcher = asyncio.create_task(self._watch(self.cancel_event))
        return self

    async def _watch(self, event: asyncio.Event) -> None:
        await event.wait()
        logger.debug("Cancel requested, interrupting transfer")
        self._cancel_requested = True
        assert self._task is not None
        self._task.cancel()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._watcher is not None and not self._watcher.done():
            self._watcher.cancel()

        assert self._deadline is not None and self._task is not None
        try:
            await self._deadline.__aexit__(exc_type, exc, tb)
        except TimeoutError as e:
            raise DeadlineExceeded(
                f"transfer did not finish within {self.timeout}s"
            ) from e

        if self._cancel_requested and exc_type is asyncio.CancelledError:
            # Only swallow the cancellation this scope requested
            if self._task.uncancel() == 0:
                raise Cancelled("transfer cancelled") from exc
