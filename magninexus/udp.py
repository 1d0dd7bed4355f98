"""UDP chat endpoint exchanging one packet per datagram."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from os import PathLike

from magninexus.framing import attachment_packet, message_packet, parse_packet


class _Protocol(asyncio.DatagramProtocol):
    def __init__(self, receive: Callable[[bytes, tuple], None]) -> None:
        self.datagram_received = receive


class UdpEndpoint:
    """Sends packets as datagrams; status lines and received messages go to ``on_message``.

    Sending before listening binds the endpoint to a free port.
    """

    def __init__(self, on_message: Callable[[str], None]) -> None:
        self._on_message = on_message
        self._transport: asyncio.DatagramTransport | None = None

    @property
    def port(self) -> int | None:
        """The local port, or ``None`` when not bound."""
        if self._transport is None:
            return None
        return self._transport.get_extra_info("sockname")[1]

    async def start_listening(self, port: int, host: str = "0.0.0.0") -> bool:
        """Bind to ``port`` and return whether it worked."""
        try:
            if self._transport is not None:
                raise OSError("already bound")
            await self._open(host, port)
        except OSError:
            self._on_message("Failed to start UDP server.")
            return False
        self._on_message("UDP Server is listening...")
        return True

    async def send_message(self, address: str, port: int, message: str) -> None:
        """Send a text message to ``address``:``port``."""
        await self._send_data(address, port, message_packet(message))

    async def send_attachment(
        self, address: str, port: int, file_path: str | PathLike[str]
    ) -> None:
        """Send a file's contents; ``OSError`` if it cannot be read."""
        await self._send_data(address, port, attachment_packet(file_path))

    def close(self) -> None:
        """Release the socket."""
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    async def _open(self, host: str, port: int) -> None:
        loop = asyncio.get_running_loop()
        self._transport, _ = await loop.create_datagram_endpoint(
            lambda: _Protocol(self._receive), local_addr=(host, port)
        )

    async def _send_data(self, address: str, port: int, data: bytes) -> None:
        if self._transport is None:
            await self._open("0.0.0.0", 0)
        self._transport.sendto(data, (address, port))

    def _receive(self, data: bytes, addr: tuple) -> None:
        try:
            packet = parse_packet(data)
        except ValueError:
            return
        if packet.file_type == "message":
            text = packet.payload.decode("utf-8", errors="replace")
            self._on_message(f"{addr[0]}:{addr[1]} :: {text}")