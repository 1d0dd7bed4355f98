import asyncio
import socket
from contextlib import asynccontextmanager

import pytest

from magninexus.framing import build_header, message_packet, parse_packet
from magninexus.udp import UdpEndpoint

HOST = "127.0.0.1"


async def _wait_for(predicate, timeout=3.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@asynccontextmanager
async def _listening():
    messages = []
    endpoint = UdpEndpoint(messages.append)
    await endpoint.start_listening(0, HOST)
    try:
        yield endpoint, messages
    finally:
        endpoint.close()


@pytest.mark.asyncio
async def test_start_listening_reports_success():
    async with _listening() as (endpoint, messages):
        assert messages == ["UDP Server is listening..."]
        assert endpoint.port > 0


@pytest.mark.asyncio
async def test_start_listening_on_busy_port_reports_failure():
    async with _listening() as (first, _):
        messages = []
        second = UdpEndpoint(messages.append)
        assert await second.start_listening(first.port, HOST) is False
        assert messages == ["Failed to start UDP server."]
        assert second.port is None


@pytest.mark.asyncio
async def test_start_listening_twice_reports_failure():
    async with _listening() as (endpoint, messages):
        assert await endpoint.start_listening(0, HOST) is False
        assert messages[-1] == "Failed to start UDP server."


@pytest.mark.asyncio
async def test_message_between_endpoints():
    async with _listening() as (sender, _), _listening() as (receiver, messages):
        await sender.send_message(HOST, receiver.port, "hello")
        expected = f"{HOST}:{sender.port} :: hello"
        await _wait_for(lambda: expected in messages)
        assert messages[-1] == expected


@pytest.mark.asyncio
async def test_sending_before_listening_binds_automatically():
    async with _listening() as (receiver, messages):
        sender = UdpEndpoint(lambda line: None)
        assert sender.port is None
        try:
            await sender.send_message(HOST, receiver.port, "auto")
            expected = f"{HOST}:{sender.port} :: auto"
            await _wait_for(lambda: expected in messages)
            assert sender.port > 0
        finally:
            sender.close()


@pytest.mark.asyncio
async def test_attachments_and_malformed_datagrams_are_not_reported(tmp_path):
    path = tmp_path / "small.bin"
    path.write_bytes(b"data")
    async with _listening() as (sender, _), _listening() as (receiver, messages):
        await sender.send_attachment(HOST, receiver.port, path)
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as raw:
            raw.sendto(b"garbage", (HOST, receiver.port))
        await sender.send_message(HOST, receiver.port, "last")
        await _wait_for(lambda: any(m.endswith(" :: last") for m in messages))
        assert [m for m in messages if " :: " in m] == [
            f"{HOST}:{sender.port} :: last"
        ]


@pytest.mark.asyncio
async def test_datagram_carries_exact_packet(tmp_path):
    path = tmp_path / "doc.txt"
    path.write_bytes(b"document")
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as raw:
        raw.bind((HOST, 0))
        raw.settimeout(3.0)
        port = raw.getsockname()[1]
        endpoint = UdpEndpoint(lambda line: None)
        loop = asyncio.get_running_loop()
        try:
            await endpoint.send_message(HOST, port, "exact")
            data, _ = await loop.run_in_executor(None, raw.recvfrom, 65536)
            assert data == message_packet("exact")
            await endpoint.send_attachment(HOST, port, path)
            data, _ = await loop.run_in_executor(None, raw.recvfrom, 65536)
            packet = parse_packet(data)
            assert data[:128] == build_header("attachment", "doc.txt", len(b"document"))
            assert packet.payload == b"document"
        finally:
            endpoint.close()


@pytest.mark.asyncio
async def test_send_attachment_missing_file_raises(tmp_path):
    async with _listening() as (endpoint, _):
        with pytest.raises(FileNotFoundError):
            await endpoint.send_attachment(HOST, endpoint.port, tmp_path / "absent")


@pytest.mark.asyncio
async def test_close_releases_port():
    messages = []
    endpoint = UdpEndpoint(messages.append)
    await endpoint.start_listening(0, HOST)
    endpoint.close()
    assert endpoint.port is None
    assert await endpoint.start_listening(0, HOST) is True
    endpoint.close()