# tpzero

A small TCP client and server that exchange framed messages and packages of
text values.

## Wire format

Every frame starts with two little-endian signed 32-bit integers, the
operation code and the payload size, followed by the payload
(`tpzero.protocol`):

- `OpCode.MESSAGE` (0): the payload is a NUL-terminated UTF-8 string.
- `OpCode.PACKAGE` (1): the payload is a sequence of entries, each written as
  a 32-bit size followed by that many bytes. Text entries are NUL-terminated.

## Installation

    pip install .

## Running the server

    tpzero-server [--host HOST] [--port PORT] [--log FILE]

By default the server binds every IPv4 address on port 4444 and logs to
`log.log` and to the console. It accepts one client and logs every message
and every entry of every package it receives; an unknown operation code is
logged as a warning. When the client disconnects the server stops with exit
status 1.

## Running the client

    tpzero-client [--config FILE] [--log FILE]

The client reads a `KEY=VALUE` configuration file (default `cliente.config`;
blank lines and lines starting with `#` are skipped) which must hold the keys
`CLAVE`, `IP` and `PUERTO`. It logs them to `tp0.log` (by default) and to the
console, and then:

1. logs each line typed at the `> ` prompt until an empty line or end of input;
2. connects over IPv4 TCP to `IP:PUERTO` and sends the value of `CLAVE` as a
   message;
3. reads more lines the same way, collects them in a package and sends it.

The client exits with status 1 if the configuration cannot be read, a key is
missing, or the connection fails.

## Library use

    from tpzero.protocol import Package, encode_message, decode_values

    package = Package()
    package.add("hello")          # text is sent NUL-terminated
    package.add(b"raw\0")         # bytes are sent as given
    frame = package.serialize()

    message_frame = encode_message("CLAVE")

    decode_values(package.payload)   # ['hello', 'raw']

`decode_values` raises `ValueError` on a truncated payload or a negative entry
size. `tpzero.client` provides `create_connection`, `send_message`,
`send_package`, `build_package`, `read_lines`, `log_console` and
`load_config`; `tpzero.server` provides `start_server`, `wait_client`,
`receive_operation`, `receive_buffer`, `receive_message`, `receive_package`
and `serve_client`.

## What it does not do

The server handles a single client and then exits; it does not accept further
connections or serve clients concurrently. Nothing is sent back to the client.