"""Packet framing shared by the TCP and UDP transports.

Every packet is a fixed 128-byte, zero-padded text header of the form
``fileType:<type>,fileName:<name>,fileSize:<size>;`` followed by the payload.
On a stream the packet is additionally prefixed with a 32-bit big-endian
length, so that packets can be separated again on the receiving side.
"""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass
from os import PathLike
from pathlib import Path

HEADER_SIZE = 128

_LENGTH = struct.Struct(">I")
_NULL_LENGTH = 0xFFFFFFFF
_FIELDS = re.compile(r"fileName:(?P<name>.*),fileSize:(?P<size>\d+);", re.DOTALL)


@dataclass(frozen=True)
class Packet:
    """A decoded packet: header fields and the payload that follows them."""

    file_type: str
    file_name: str | None
    file_size: int | None
    payload: bytes


def build_header(file_type: str, file_name: str, file_size: int) -> bytes:
    """Return the header for a packet, truncated or zero-padded to 128 bytes."""
    text = f"fileType:{file_type},fileName:{file_name},fileSize:{file_size};"
    return text.encode("utf-8")[:HEADER_SIZE].ljust(HEADER_SIZE, b"\0")


def _utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def message_packet(message: str) -> bytes:
    """Return a text message packet.

    The size field counts UTF-16 code units of the message, the payload is
    the message encoded as UTF-8.
    """
    header = build_header("message", "null", _utf16_length(message))
    return header + message.encode("utf-8")


def attachment_packet(file_path: str | PathLike[str]) -> bytes:
    """Return a packet carrying the contents of the file at ``file_path``.

    Raises ``OSError`` if the file cannot be read.
    """
    path = Path(file_path)
    content = path.read_bytes()
    return build_header("attachment", path.name, len(content)) + content


def parse_packet(data: bytes) -> Packet:
    """Split a packet into its header fields and payload.

    Raises ``ValueError`` if the header carries no file type.
    """
    raw_header = bytes(data[:HEADER_SIZE]).split(b"\0", 1)[0]
    header = raw_header.decode("utf-8", errors="replace")
    first_field = header.split(",")[0].split(":")
    if len(first_field) < 2:
        raise ValueError(f"malformed packet header: {header!r}")

    file_name: str | None = None
    file_size: int | None = None
    fields = _FIELDS.search(header)
    if fields is not None:
        file_name = fields.group("name")
        file_size = int(fields.group("size"))

    return Packet(
        file_type=first_field[1],
        file_name=file_name,
        file_size=file_size,
        payload=bytes(data[HEADER_SIZE:]),
    )


def encode_stream_bytes(data: bytes) -> bytes:
    """Prefix ``data`` with its length as a 32-bit big-endian integer."""
    return _LENGTH.pack(len(data)) + bytes(data)


def decode_stream_bytes(buffer: bytes) -> tuple[bytes, int] | None:
    """Read one length-prefixed block from the start of ``buffer``.

    Returns the block and the number of bytes it took up, or ``None`` while
    the buffer does not yet hold the whole block. A length of 0xFFFFFFFF
    stands for an empty block.
    """
    if len(buffer) < _LENGTH.size:
        return None
    (length,) = _LENGTH.unpack_from(buffer)
    if length == _NULL_LENGTH:
        return b"", _LENGTH.size
    end = _LENGTH.size + length
    if len(buffer) < end:
        return None
    return bytes(buffer[_LENGTH.size:end]), end