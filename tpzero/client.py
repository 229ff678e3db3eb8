"""Client: logs console input and sends a message and a package to the server."""

from __future__ import annotations

import argparse
import logging
import socket
from collections.abc import Callable, Iterable, Iterator

from tpzero.protocol import Package, encode_message

PROMPT = "> "


def create_logger(path: str = "tp0.log") -> logging.Logger:
    """Return the client logger, writing to ``path`` and to the console."""
    logger = logging.getLogger("TP0")
    logger.setLevel(logging.INFO)
    _close_logger(logger)
    formatter = logging.Formatter(
        "[%(levelname)s] %(asctime)s %(name)s - %(message)s", "%H:%M:%S"
    )
    for handler in (logging.FileHandler(path, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False
    return logger


def _close_logger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def load_config(path: str) -> dict[str, str]:
    """Read a KEY=VALUE file; blank lines and lines starting with '#' are skipped."""
    config: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            line = raw.rstrip("\r\n")
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if sep:
                config[key] = value
    return config


def read_lines(input_func: Callable[[str], str] | None = None) -> Iterator[str]:
    """Yield prompted lines until an empty line or end of input."""
    read = input_func or input
    while True:
        try:
            line = read(PROMPT)
        except EOFError:
            return
        if not line:
            return
        yield line


def log_console(logger: logging.Logger, input_func: Callable[[str], str] | None = None) -> None:
    """Log every console line until an empty one is entered."""
    for line in read_lines(input_func):
        logger.info("%s", line)


def build_package(lines: Iterable[str]) -> Package:
    """Collect ``lines`` into a package."""
    package = Package()
    for line in lines:
        package.add(line)
    return package


def create_connection(ip: str, port: str | int) -> socket.socket:
    """Connect over IPv4 TCP to the first address that accepts."""
    infos = socket.getaddrinfo(ip, port, socket.AF_INET, socket.SOCK_STREAM)
    last_error: OSError | None = None
    for family, sock_type, proto, _, address in infos:
        try:
            sock = socket.socket(family, sock_type, proto)
        except OSError as exc:
            last_error = exc
            continue
        try:
            sock.connect(address)
        except OSError as exc:
            sock.close()
            last_error = exc
            continue
        return sock
    raise ConnectionError(f"could not connect to {ip}:{port}") from last_error


def send_message(message: str, sock: socket.socket) -> None:
    """Send one text message."""
    sock.sendall(encode_message(message))


def send_package(package: Package, sock: socket.socket) -> None:
    """Send a package."""
    sock.sendall(package.serialize())


def main(argv: list[str] | None = None) -> int:
    """Run the client; returns the exit status."""
    parser = argparse.ArgumentParser(prog="tpzero-client")
    parser.add_argument("--config", default="cliente.config", help="configuration file")
    parser.add_argument("--log", default="tp0.log", help="log file")
    args = parser.parse_args(argv)

    logger = create_logger(args.log)
    try:
        logger.info("Hola!! Soy un log")
        try:
            config = load_config(args.config)
        except OSError:
            logger.error("Could not load the configuration from %s", args.config)
            return 1
        try:
            key, ip, port = config["CLAVE"], config["IP"], config["PUERTO"]
        except KeyError as exc:
            logger.error("Missing configuration key %s", exc)
            return 1

        logger.info("KEY: %s", key)
        logger.info("IP: %s", ip)
        logger.info("PORT: %s", port)

        log_console(logger)

        try:
            with create_connection(ip, port) as sock:
                send_message(key, sock)
                send_package(build_package(read_lines()), sock)
        except OSError as exc:
            logger.error("Connection failed: %s", exc)
            return 1
    finally:
        _close_logger(logger)
    return 0