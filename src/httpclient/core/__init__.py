"""
Transport layer: buffered reading and writing over a connected socket.
"""

from .streamer import Streamer, LineWriter, TransportError

__all__ = [
    "Streamer",
    "LineWriter",
    "TransportError",
]
