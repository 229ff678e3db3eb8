"""Server: accepts one client and logs the messages and packages it sends."""

from __future__ import annotations

import argparse
import logging
import socket
import struct

from tpzero.protocol import OpCode, decode_values

PORT = 4444

_INT = struct.Struct("<i")
_log = logging.getLogger(__name__)


def start_server(host: str | None = None, port: int | str = PORT) -> socket.socket:
    """Bind an IPv4 TCP listening socket and start listening."""
    infos = socket.getaddrinfo(
        host, port, socket.AF_INET, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )
    for family, sock_type, proto, _, address in infos:
        try:
            sock = socket.socket(family, sock_type, proto)
        except OSError as exc:
            _log.warning("Could not create the socket: %s", exc)
            continue
        try:
            sock.bind(address)
        except OSError as exc:
            _log.error("Bind failed: %s", exc)
            sock.close()
            continue
        break
    else:
        raise OSError(f"could not bind to any address for port {port}")

    try:
        sock.listen(socket.SOMAXCONN)
    except OSError:
        sock.close()
        raise
    _log.debug("Ready to listen for a client")
    return sock


def wait_client(server_socket: socket.socket, logger: logging.Logger) -> socket.socket:
    """Accept one client connection."""
    try:
        client, _ = server_socket.accept()
    except OSError as exc:
        logger.error("Error accepting a client: %s", exc)
        raise
    logger.info("A client connected!")
    return client


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    chunks = []
    remaining = size
    while remaining:
        chunk = sock.recv(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def receive_operation(sock: socket.socket) -> int | None:
    """Read the next operation code; on disconnect close ``sock`` and return None."""
    data = _recv_exact(sock, _INT.size)
    if len(data) < _INT.size:
        sock.close()
        return None
    return _INT.unpack(data)[0]


def receive_buffer(sock: socket.socket) -> bytes:
    """Read a size-prefixed payload."""
    header = _recv_exact(sock, _INT.size)
    if len(header) < _INT.size:
        raise ConnectionError("connection closed while reading the payload size")
    (size,) = _INT.unpack(header)
    if size < 0:
        raise ValueError(f"invalid payload size {size}")
    payload = _recv_exact(sock, size)
    if len(payload) < size:
        raise ConnectionError("connection closed while reading the payload")
    return payload


def receive_message(sock: socket.socket, logger: logging.Logger) -> str:
    """Read and log one text message."""
    payload = receive_buffer(sock)
    message = payload.split(b"\0", 1)[0].decode("utf-8", errors="replace")
    logger.info("Received message %s", message)
    return message


def receive_package(sock: socket.socket) -> list[str]:
    """Read a package and return its entries."""
    return decode_values(receive_buffer(sock))


def serve_client(sock: socket.socket, logger: logging.Logger) -> None:
    """Handle operations from ``sock`` until the client disconnects."""
    while True:
        op = receive_operation(sock)
        if op is None:
            logger.error("The client disconnected. Shutting down the server")
            return
        if op == OpCode.MESSAGE:
            receive_message(sock, logger)
        elif op == OpCode.PACKAGE:
            values = receive_package(sock)
            logger.info("Received the following values:")
            for value in values:
                logger.info("%s", value)
        else:
            logger.warning("Unknown operation %d", op)


def _create_logger(path: str) -> logging.Logger:
    logger = logging.getLogger("Servidor")
    logger.setLevel(logging.DEBUG)
    formatter = logging.Formatter(
        "[%(levelname)s] %(asctime)s %(name)s - %(message)s", "%H:%M:%S"
    )
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def main(argv: list[str] | None = None) -> int:
    """Serve one client; returns 1 once it disconnects."""
    parser = argparse.ArgumentParser(prog="tpzero-server")
    parser.add_argument("--host", default=None, help="address to bind")
    parser.add_argument("--port", type=int, default=PORT, help="port to listen on")
    parser.add_argument("--log", default="log.log", help="log file")
    args = parser.parse_args(argv)

    logger = _create_logger(args.log)
    try:
        try:
            server = start_server(args.host, args.port)
        except OSError as exc:
            logger.error("Could not start the server: %s", exc)
            return 1
        with server:
            logger.info("Server ready to receive the client")
            try:
                client = wait_client(server, logger)
            except OSError:
                return 1
            with client:
                serve_client(client, logger)
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
    return 1