"""Shared fixtures for transfer tests."""

from collections.abc import Callable

import pytest

from scp_transfer.errors import RemoteFailure
from tests.fakes import FakeSession


@pytest.fixture
def make_session() -> Callable[..., FakeSession]:
    """Factory for scripted sessions."""
    return FakeSession


@pytest.fixture
def remote_exit_failure() -> RemoteFailure:
    """Failure reported by a remote scp that exited non-zero."""
    return RemoteFailure("scp: /data: Permission denied\n", exit_status=1)
