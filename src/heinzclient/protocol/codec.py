"""
Encoding and decoding of single wire messages.

Frame layout, all lengths 4-byte big-endian unsigned:

    [1 byte type][name length][name bytes][payload length][payload bytes]

An absent name or payload is sent as a zero length. Names are ASCII,
payloads are opaque bytes.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

from heinzclient.types import FramingError, Message, MessageType

_TYPE = struct.Struct(">B")
_LENGTH = struct.Struct(">I")
MAX_FIELD_LENGTH = 2**32 - 1


def encode(message: Message) -> bytes:
    """Encode one message into a frame.

    Raises
    ------
    FramingError
        If the name is not ASCII or a field is too long for its length prefix.
    """
    try:
        name = message.name.encode("ascii") if message.name is not None else b""
    except UnicodeEncodeError as e:
        raise FramingError(f"Message name must be ASCII: {message.name!r}") from e
    payload = message.payload or b""
    for field in (name, payload):
        if len(field) > MAX_FIELD_LENGTH:
            raise FramingError(f"Field of {len(field)} bytes does not fit a frame.")
    return b"".join(
        (
            _TYPE.pack(message.type),
            _LENGTH.pack(len(name)),
            name,
            _LENGTH.pack(len(payload)),
            payload,
        )
    )


def _message_from_fields(type_byte: int, name: bytes, payload: bytes) -> Message:
    try:
        msg_type = MessageType(type_byte)
    except ValueError as e:
        raise FramingError(f"Unknown message type {type_byte}.") from e
    try:
        name_str = name.decode("ascii")
    except UnicodeDecodeError as e:
        raise FramingError(f"Message name is not ASCII: {name!r}") from e
    return Message(msg_type, name_str or None, payload or None)


def decode(data: bytes) -> Message:
    """Decode a buffer holding exactly one frame.

    Raises
    ------
    FramingError
        If the buffer is truncated, has trailing bytes, or holds an unknown
        message type.
    """
    view = memoryview(data)
    pos = 0

    def take(n: int) -> bytes:
        nonlocal pos
        if pos + n > len(view):
            raise FramingError(
                f"Truncated frame: needed {n} bytes at offset {pos}, "
                f"only {len(view) - pos} left."
            )
        chunk = view[pos : pos + n].tobytes()
        pos += n
        return chunk

    (type_byte,) = _TYPE.unpack(take(_TYPE.size))
    (name_len,) = _LENGTH.unpack(take(_LENGTH.size))
    name = take(name_len)
    (payload_len,) = _LENGTH.unpack(take(_LENGTH.size))
    payload = take(payload_len)
    if pos != len(view):
        raise FramingError(f"{len(view) - pos} trailing bytes after frame.")
    return _message_from_fields(type_byte, name, payload)


def _read_exactly(stream: BinaryIO, n: int) -> bytes:
    chunks = []
    remaining = n
    while remaining:
        chunk = stream.read(remaining)
        if not chunk:
            raise FramingError(
                f"Stream ended {remaining} bytes short of a {n} byte field."
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def read_message(stream: BinaryIO) -> Message:
    """Read exactly one frame from a binary stream.

    Blocks until the whole frame has arrived. End of stream part way through
    a frame (or before it starts) raises `FramingError`.
    """
    (type_byte,) = _TYPE.unpack(_read_exactly(stream, _TYPE.size))
    (name_len,) = _LENGTH.unpack(_read_exactly(stream, _LENGTH.size))
    name = _read_exactly(stream, name_len)
    (payload_len,) = _LENGTH.unpack(_read_exactly(stream, _LENGTH.size))
    payload = _read_exactly(stream, payload_len)
    return _message_from_fields(type_byte, name, payload)
