"""SCP wire codec."""

from scp_transfer.codec.command import (
    MAX_FILE_SIZE,
    MAX_PERMISSIONS,
    decode_command,
    encode_command,
    parse_permissions,
)
from scp_transfer.codec.header import (
    parse_file_info_line,
    parse_time_line,
    read_file_header,
)
from scp_transfer.codec.response import ACK, ack, parse_response

__all__ = [
    "ACK",
    "MAX_FILE_SIZE",
    "MAX_PERMISSIONS",
    "ack",
    "decode_command",
    "encode_command",
    "parse_file_info_line",
    "parse_permissions",
    "parse_response",
    "parse_time_line",
    "read_file_header",
]
