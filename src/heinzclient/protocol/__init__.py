"""
Wire protocol shared by the fitting and solver backends.

`codec` turns single messages into frames and back; `transport` owns the
socket and enforces request/response alternation over it.
"""

from .codec import decode, encode, read_message
from .transport import Connection

__all__ = [
    "Connection",
    "decode",
    "encode",
    "read_message",
]
