import struct

import pytest

from tpzero.protocol import (
    OpCode,
    Package,
    decode_values,
    encode_message,
    serialize_frame,
)


def test_opcode_values_match_wire():
    assert serialize_frame(OpCode.MESSAGE, b"") == b"\x00\x00\x00\x00\x00\x00\x00\x00"
    assert serialize_frame(OpCode.PACKAGE, b"") == b"\x01\x00\x00\x00\x00\x00\x00\x00"


def test_encode_message_wire_bytes():
    assert encode_message("hi") == b"\x00\x00\x00\x00\x03\x00\x00\x00hi\x00"


def test_serialize_frame_layout():
    frame = serialize_frame(OpCode.PACKAGE, b"abc")
    op, size = struct.unpack_from("<ii", frame)
    assert op == OpCode.PACKAGE
    assert size == 3
    assert frame[8:] == b"abc"


def test_empty_package_header():
    assert Package().serialize() == b"\x01\x00\x00\x00\x00\x00\x00\x00"


def test_package_round_trip():
    package = Package()
    for line in ["alpha", "beta", "ñandú"]:
        package.add(line)
    frame = package.serialize()
    op, size = struct.unpack_from("<ii", frame)
    assert op == OpCode.PACKAGE
    assert size == len(frame) - 8
    assert decode_values(frame[8:]) == ["alpha", "beta", "ñandú"]


def test_package_add_bytes_kept_raw():
    package = Package()
    package.add(b"raw")
    assert decode_values(package.payload) == ["raw"]
    assert bytes(package.payload[4:]) == b"raw"


def test_add_text_includes_terminator():
    package = Package()
    package.add("xy")
    (size,) = struct.unpack_from("<i", package.payload)
    assert size == len("xy") + 1


def test_decode_empty_payload():
    assert decode_values(b"") == []


def test_decode_truncated_size():
    with pytest.raises(ValueError):
        decode_values(b"\x01\x00")


def test_decode_truncated_entry():
    with pytest.raises(ValueError):
        decode_values(struct.pack("<i", 10) + b"abc")


def test_decode_negative_size():
    with pytest.raises(ValueError):
        decode_values(struct.pack("<i", -1))