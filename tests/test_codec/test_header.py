"""Tests for download header framing."""

import pytest

from scp_transfer.codec import (
    parse_file_info_line,
    parse_time_line,
    read_file_header,
)
from scp_transfer.errors import (
    MalformedWireLine,
    ParseError,
    ProtocolViolation,
    RemoteFailure,
    StreamIOError,
)
from scp_transfer.models import FileInfo
from tests.fakes import FakeReader, FakeWriter


class TestParseFileInfoLine:
    """Test Create-line body parsing."""

    def test_basic(self) -> None:
        """Mode, size and name are extracted."""
        assert parse_file_info_line("0644 5 hello\n") == (0o644, 5, "hello")

    def test_filename_with_spaces(self) -> None:
        """Everything after the size is the name."""
        line = "0777 9 Exöt1ç uploaded file.txt\n".encode()
        assert parse_file_info_line(line) == (0o777, 9, "Exöt1ç uploaded file.txt")

    def test_setuid_mode(self) -> None:
        """Special mode bits sent by the remote are kept."""
        assert parse_file_info_line("4755 1 tool\n")[0] == 0o4755

    def test_too_few_fields(self) -> None:
        """Two fields violate the protocol."""
        with pytest.raises(ProtocolViolation):
            parse_file_info_line("0644 5\n")

    def test_non_numeric_size(self) -> None:
        """Size must be decimal."""
        with pytest.raises(ParseError):
            parse_file_info_line("0644 five hello\n")

    def test_negative_size(self) -> None:
        """Negative sizes violate the protocol."""
        with pytest.raises(ProtocolViolation):
            parse_file_info_line("0644 -5 hello\n")


class TestParseTimeLine:
    """Test Time-line body parsing."""

    def test_mtime_then_atime(self) -> None:
        """Field 0 is mtime, field 2 is atime."""
        atime, mtime = parse_time_line("1610000000 0 1610000001 0\n")
        assert mtime == 1610000000
        assert atime == 1610000001

    def test_trailing_digits_ignored(self) -> None:
        """Only the first ten digits of a timestamp are significant."""
        atime, mtime = parse_time_line(b"1610000000123 0 1610000001456 0\n")
        assert (atime, mtime) == (1610000001, 1610000000)

    def test_non_numeric(self) -> None:
        """Timestamps must be numeric."""
        with pytest.raises(MalformedWireLine):
            parse_time_line("16100abc00 0 1610000001 0\n")

    def test_too_few_fields(self) -> None:
        """The access time field is required."""
        with pytest.raises(MalformedWireLine):
            parse_time_line("1610000000 0\n")


class TestReadFileHeader:
    """Test reading the header of a downloaded file."""

    @pytest.mark.asyncio
    async def test_time_and_create(self) -> None:
        """Time line is acked, Create line is merged in."""
        reader = FakeReader(b"T1610000000 0 1610000001 0\nC0644 5 hello\nhello")
        writer = FakeWriter()

        info = await read_file_header(reader, writer)

        assert info == FileInfo(
            permissions=0o644,
            size=5,
            filename="hello",
            atime=1610000001,
            mtime=1610000000,
        )
        assert writer.data == b"\x00"
        assert reader.remaining == b"hello"

    @pytest.mark.asyncio
    async def test_create_only(self) -> None:
        """Without a Time line no ack is sent and times are unset."""
        writer = FakeWriter()

        info = await read_file_header(FakeReader(b"C0600 12 notes.txt\n"), writer)

        assert info.size == 12
        assert info.atime is None
        assert info.mtime is None
        assert writer.data == b""

    @pytest.mark.asyncio
    async def test_remote_error_verbatim(self) -> None:
        """Remote errors surface with their exact message."""
        reader = FakeReader(b"\x01scp: /no/such: No such file or directory\n")

        with pytest.raises(RemoteFailure) as exc_info:
            await read_file_header(reader, FakeWriter())

        assert str(exc_info.value) == "scp: /no/such: No such file or directory\n"

    @pytest.mark.asyncio
    async def test_bare_ok_is_violation(self) -> None:
        """An ack where a header belongs violates the protocol."""
        with pytest.raises(ProtocolViolation):
            await read_file_header(FakeReader(b"\x00"), FakeWriter())

    @pytest.mark.asyncio
    async def test_directory_rejected(self) -> None:
        """Directory records are not supported."""
        with pytest.raises(ProtocolViolation, match="directory"):
            await read_file_header(FakeReader(b"D0755 0 dir\n"), FakeWriter())

    @pytest.mark.asyncio
    async def test_unknown_tag(self) -> None:
        """Unknown tags violate the protocol."""
        with pytest.raises(ProtocolViolation):
            await read_file_header(FakeReader(b"X0644 5 hello\n"), FakeWriter())

    @pytest.mark.asyncio
    async def test_time_without_create(self) -> None:
        """A Time line must be followed by a Create line."""
        reader = FakeReader(b"T1610000000 0 1610000001 0\nT1610000000 0 1610000001 0\n")

        with pytest.raises(ProtocolViolation):
            await read_file_header(reader, FakeWriter())

    @pytest.mark.asyncio
    async def test_stream_closed(self) -> None:
        """An empty stream is an I/O error."""
        with pytest.raises(StreamIOError):
            await read_file_header(FakeReader(b""), FakeWriter())
