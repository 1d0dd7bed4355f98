# magninexus

Asyncio-based TCP and UDP endpoints that exchange text messages and file
attachments. Every packet starts with a 128-byte header of this form:

```
fileType:<message|attachment>,fileName:<name>,fileSize:<size>;
```

The header is truncated or padded with zero bytes to exactly 128 bytes, and
the payload follows it. A text message has `fileName:null`, and its size
field counts UTF-16 code units of the text; the payload is the text in
UTF-8. An attachment carries the file's base name and its size in bytes.

On TCP, each packet is additionally prefixed with its length as a 4-byte
big-endian integer. On UDP, one packet travels in one datagram.

The package has no third-party dependencies.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Framing (`magninexus.framing`)

```python
from magninexus.framing import message_packet, parse_packet

data = message_packet("hello")
packet = parse_packet(data)
print(packet.file_type, packet.file_name, packet.file_size, packet.payload)
# message null 5 b'hello'
```

- `build_header(file_type, file_name, file_size)` returns the 128-byte header.
- `message_packet(message)` returns a complete text message packet.
- `attachment_packet(file_path)` reads a file and returns a packet holding
  its contents; it raises `OSError` if the file cannot be read.
- `parse_packet(data)` returns a `Packet` with `file_type`, `file_name`,
  `file_size` and `payload`. `file_name` and `file_size` are `None` when the
  header does not carry them; a header without a file type raises
  `ValueError`.
- `encode_stream_bytes(data)` adds the 4-byte length prefix.
- `decode_stream_bytes(buffer)` reads one length-prefixed block from the
  start of `buffer` and returns `(block, bytes_consumed)`, or `None` while
  the block is still incomplete. A length of `0xFFFFFFFF` stands for an
  empty block.

## TCP server (`magninexus.tcp`)

```python
import asyncio
from magninexus.tcp import TcpServer

async def main():
    server = TcpServer(on_message=print)
    await server.start_server(5000, "0.0.0.0")   # prints "Server is listening..."
    try:
        await asyncio.sleep(3600)
    finally:
        await server.stop_server()

asyncio.run(main())
```

`start_server(port, host="0.0.0.0")` returns `True` on success; on failure
it reports `Unable to start server: <reason>` and returns `False`. The
`port` property gives the port actually bound (useful with port 0), or
`None` when not listening.

The server reports through the `on_message` callback:

- `Client connected: <fd>` for each new client, where `<fd>` is the socket's
  file descriptor;
- `<fd> :: <text>` for each incoming text message;
- `Client disconnected` when a client goes away;
- `Socket error: <reason>` for socket errors other than a connection reset.

Incoming attachments and malformed packets are read and dropped.

The `connections` property holds the `asyncio.StreamWriter` of every
connected client. To reply, `await server.send_message(writer, text)` or
`await server.send_attachment(writer, path)`; nothing is sent to a writer
that is `None` or closing. `stop_server()` closes every client connection
and stops listening.

## UDP endpoint (`magninexus.udp`)

```python
import asyncio
from magninexus.udp import UdpEndpoint

async def main():
    endpoint = UdpEndpoint(on_message=print)
    await endpoint.start_listening(5001, "127.0.0.1")   # prints "UDP Server is listening..."
    await endpoint.send_message("127.0.0.1", endpoint.port, "hello")
    await asyncio.sleep(0.1)       # prints "127.0.0.1:5001 :: hello"
    endpoint.close()

asyncio.run(main())
```

`start_listening(port, host="0.0.0.0")` returns `True` on success, or
reports `Failed to start UDP server.` and returns `False`. Each received
text message is reported as `<sender address>:<sender port> :: <text>`;
attachments and malformed datagrams are dropped. `send_message(address,
port, message)` and `send_attachment(address, port, file_path)` are
coroutines; sending before listening binds the endpoint to a free port on
all interfaces. The `port` property gives the local port, or `None` when
unbound, and `close()` releases the socket.

## What this package does not do

- It has no graphical window and no command-line program; it is a library
  to be driven from your own asyncio code.
- It has no TCP client: `TcpServer` only accepts connections. A client has
  to open the connection itself and use the framing functions.
- Received attachments are not saved anywhere; only text messages are
  reported.