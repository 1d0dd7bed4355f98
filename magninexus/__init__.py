"""Text message and file attachment exchange over TCP and UDP with a fixed 128-byte header framing."""

__version__ = "0.1.0"
__all__ = ["framing", "tcp", "udp"]