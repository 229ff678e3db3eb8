import logging
import socket
import struct

import pytest

from tpzero.protocol import OpCode, Package, encode_message, serialize_frame
from tpzero.server import (
    receive_buffer,
    receive_message,
    receive_operation,
    receive_package,
    serve_client,
    start_server,
    wait_client,
)

LOGGER_NAME = "tpzero.test.server"


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


@pytest.fixture
def logger(caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    return logging.getLogger(LOGGER_NAME)


def test_receive_operation(pair):
    left, right = pair
    left.sendall(struct.pack("<i", OpCode.PACKAGE))
    assert receive_operation(right) == OpCode.PACKAGE


def test_receive_operation_disconnect(pair):
    left, right = pair
    left.close()
    assert receive_operation(right) is None
    assert right.fileno() == -1


def test_receive_buffer(pair):
    left, right = pair
    left.sendall(struct.pack("<i", 5) + b"hello")
    assert receive_buffer(right) == b"hello"


def test_receive_buffer_truncated(pair):
    left, right = pair
    left.sendall(struct.pack("<i", 10) + b"abc")
    left.shutdown(socket.SHUT_WR)
    with pytest.raises(ConnectionError):
        receive_buffer(right)


def test_receive_message(pair, logger, caplog):
    left, right = pair
    left.sendall(encode_message("hello"))
    assert receive_operation(right) == OpCode.MESSAGE
    assert receive_message(right, logger) == "hello"
    assert any("hello" in m for m in caplog.messages)


def test_receive_package(pair):
    left, right = pair
    package = Package()
    package.add("alpha")
    package.add("beta")
    left.sendall(package.serialize())
    assert receive_operation(right) == OpCode.PACKAGE
    assert receive_package(right) == ["alpha", "beta"]


def test_start_server_and_wait_client(logger, caplog):
    with start_server("127.0.0.1", 0) as server:
        host, port = server.getsockname()
        assert host == "127.0.0.1"
        with socket.create_connection((host, port)) as client:
            with wait_client(server, logger) as conn:
                client.sendall(encode_message("hi"))
                assert receive_operation(conn) == OpCode.MESSAGE
                assert receive_message(conn, logger) == "hi"
    assert any("connected" in m for m in caplog.messages)


def test_start_server_port_in_use():
    with start_server("127.0.0.1", 0) as server:
        port = server.getsockname()[1]
        with pytest.raises(OSError):
            start_server("127.0.0.1", port)