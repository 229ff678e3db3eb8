"""Wire format shared by the client and the server.

A frame is a little-endian 32-bit operation code, a little-endian 32-bit
payload size and the payload itself. A package payload is a sequence of
entries, each a 32-bit size followed by that many bytes.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

_INT = struct.Struct("<i")


class OpCode(IntEnum):
    """Operations a frame can carry."""

    MESSAGE = 0
    PACKAGE = 1


def _as_bytes(value: str | bytes | bytearray) -> bytes:
    """Text is sent NUL-terminated; raw bytes are sent as given."""
    if isinstance(value, str):
        return value.encode("utf-8") + b"\0"
    return bytes(value)


def serialize_frame(op_code: int, payload: bytes | bytearray) -> bytes:
    """Build a complete frame for ``op_code`` carrying ``payload``."""
    data = bytes(payload)
    return _INT.pack(int(op_code)) + _INT.pack(len(data)) + data


def encode_message(message: str | bytes) -> bytes:
    """Build a MESSAGE frame for a single text message."""
    return serialize_frame(OpCode.MESSAGE, _as_bytes(message))


@dataclass
class Package:
    """A PACKAGE frame under construction."""

    payload: bytearray = field(default_factory=bytearray)
    op_code: OpCode = OpCode.PACKAGE

    def add(self, value: str | bytes | bytearray) -> None:
        """Append one size-prefixed entry."""
        data = _as_bytes(value)
        self.payload += _INT.pack(len(data)) + data

    def serialize(self) -> bytes:
        """Return the frame ready to be sent."""
        return serialize_frame(self.op_code, self.payload)


def decode_values(payload: bytes | bytearray) -> list[str]:
    """Split a package payload into its text entries.

    Each entry is read up to its first NUL byte. Raises ValueError when the
    payload is truncated or holds a negative size.
    """
    data = bytes(payload)
    values: list[str] = []
    offset = 0
    while offset < len(data):
        if offset + _INT.size > len(data):
            raise ValueError(f"truncated entry size at offset {offset}")
        (size,) = _INT.unpack_from(data, offset)
        offset += _INT.size
        if size < 0 or offset + size > len(data):
            raise ValueError(f"invalid entry size {size} at offset {offset}")
        entry = data[offset:offset + size]
        values.append(entry.split(b"\0", 1)[0].decode("utf-8", errors="replace"))
        offset += size
    return values