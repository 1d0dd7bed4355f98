"""TCP chat server exchanging length-prefixed packets with its clients."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from os import PathLike

from magninexus.framing import (
    attachment_packet,
    decode_stream_bytes,
    encode_stream_bytes,
    message_packet,
    parse_packet,
)


class TcpServer:
    """Accepts TCP clients; status lines and received messages go to ``on_message``."""

    def __init__(self, on_message: Callable[[str], None]) -> None:
        self._on_message = on_message
        self._server: asyncio.AbstractServer | None = None
        self._connections: set[asyncio.StreamWriter] = set()

    @property
    def port(self) -> int | None:
        """The listening port, or ``None`` when not listening."""
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()[1]

    @property
    def connections(self) -> frozenset[asyncio.StreamWriter]:
        """Writers of the connected clients."""
        return frozenset(self._connections)

    async def start_server(self, port: int, host: str = "0.0.0.0") -> bool:
        """Start listening and return whether it worked."""
        try:
            if self._server is not None:
                raise OSError("the server is already listening")
            self._server = await asyncio.start_server(self._handle_client, host, port)
        except OSError as exc:
            self._on_message(f"Unable to start server: {exc}")
            return False
        self._on_message("Server is listening...")
        return True

    async def stop_server(self) -> None:
        """Close every client connection and stop listening."""
        for writer in self._connections:
            writer.close()
        self._connections.clear()
        if self._server is not None:
            server, self._server = self._server, None
            server.close()
            await server.wait_closed()

    async def send_message(self, writer: asyncio.StreamWriter | None, message: str) -> None:
        """Send a text message to one client."""
        await self._send_data(writer, message_packet(message))

    async def send_attachment(
        self, writer: asyncio.StreamWriter | None, file_path: str | PathLike[str]
    ) -> None:
        """Send a file's contents to one client; ``OSError`` if it cannot be read."""
        await self._send_data(writer, attachment_packet(file_path))

    async def _send_data(self, writer: asyncio.StreamWriter | None, data: bytes) -> None:
        if writer is not None and not writer.is_closing():
            writer.write(encode_stream_bytes(data))
            await writer.drain()

    async def _handle_client(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        sock = writer.get_extra_info("socket")
        descriptor = sock.fileno() if sock is not None else -1
        self._connections.add(writer)
        self._on_message(f"Client connected: {descriptor}")
        buffer = bytearray()
        try:
            while chunk := await reader.read(65536):
                buffer.extend(chunk)
                while (frame := decode_stream_bytes(buffer)) is not None:
                    data, consumed = frame
                    del buffer[:consumed]
                    self._receive(data, descriptor)
        except ConnectionResetError:
            pass
        except OSError as exc:
            self._on_message(f"Socket error: {exc}")
        finally:
            self._connections.discard(writer)
            writer.close()
            self._on_message("Client disconnected")

    def _receive(self, data: bytes, descriptor: int) -> None:
        try:
            packet = parse_packet(data)
        except ValueError:
            return
        if packet.file_type == "message":
            text = packet.payload.decode("utf-8", errors="replace")
            self._on_message(f"{descriptor} :: {text}")