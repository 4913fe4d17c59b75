"""Tests for the frame codec."""

import io
import struct

import pytest

from heinzclient.protocol import decode, encode, read_message
from heinzclient.types import FramingError, Message, MessageType, OutputIndex

NAMES = [None, "-lambda", "254"]
PAYLOADS = [None, b"0.01", b"\x89PNG\r\n\x1a\n\x00\xff\x00"]


@pytest.mark.parametrize("msg_type", list(MessageType))
@pytest.mark.parametrize("name", NAMES)
@pytest.mark.parametrize("payload", PAYLOADS)
def test_round_trip(msg_type, name, payload):
    msg = Message(msg_type, name, payload)
    assert decode(encode(msg)) == msg
    assert read_message(io.BytesIO(encode(msg))) == msg


def test_empty_fields_encode_as_zero_length():
    assert encode(Message(MessageType.ALIVE)) == b"\x00" + b"\x00" * 8
    assert Message(MessageType.ACK, "", b"") == Message(MessageType.ACK)
    assert decode(encode(Message(MessageType.ACK, "", b""))).name is None


def test_wire_layout():
    frame = encode(Message.parameter("-s", "10"))
    assert frame == b"\x0a" + b"\x00\x00\x00\x02-s" + b"\x00\x00\x00\x0210"

    frame = encode(Message.get_output(OutputIndex.STDOUT))
    assert frame == bytes([50]) + struct.pack(">I", 3) + b"254" + struct.pack(">I", 0)


def test_lengths_are_big_endian():
    payload = b"x" * 258
    frame = encode(Message.input_file("-i", payload))
    assert frame[1:5] == b"\x00\x00\x00\x02"
    assert frame[7:11] == b"\x00\x00\x01\x02"


def test_truncated_frame():
    frame = encode(Message(MessageType.OUTPUT, payload=b"some output"))
    for cut in (0, 1, 4, 5, len(frame) - 1):
        with pytest.raises(FramingError):
            decode(frame[:cut])
        with pytest.raises(FramingError):
            read_message(io.BytesIO(frame[:cut]))


def test_trailing_bytes():
    with pytest.raises(FramingError):
        decode(encode(Message(MessageType.ACK)) + b"\x00")


def test_unknown_type():
    with pytest.raises(FramingError, match="Unknown message type 7"):
        decode(b"\x07" + b"\x00" * 8)


def test_non_ascii_name():
    with pytest.raises(FramingError):
        encode(Message(MessageType.PARAMETER, "-λ"))
    with pytest.raises(FramingError):
        decode(b"\x0a\x00\x00\x00\x01\xff\x00\x00\x00\x00")


def test_read_consecutive_messages():
    msgs = [
        Message(MessageType.ACK),
        Message(MessageType.NACK, payload=b"bad flag"),
        Message(MessageType.OUTPUT, payload=b"42\t3.7\n"),
    ]
    stream = io.BytesIO(b"".join(encode(m) for m in msgs))
    assert [read_message(stream) for _ in msgs] == msgs
    with pytest.raises(FramingError):
        read_message(stream)


def test_output_index_tokens():
    assert Message.get_output(OutputIndex.PRIMARY).name == "0"
    assert Message.get_output(OutputIndex.STDOUT).name == "254"
    assert OutputIndex.STDERR.token == "255"


def test_response_types():
    assert MessageType.ACK.is_response
    assert MessageType.OUTPUT.is_response
    assert not MessageType.RUN.is_response
