"""Message types and constants for client-backend communication."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Union

# payloads longer than this are shown by size only in log output
_REPR_PAYLOAD_LIMIT = 32


class MessageType(IntEnum):
    """Type byte of a wire message.

    Requests are sent by the client, responses by the backend.
    """

    # requests
    ALIVE = 0
    PARAMETER = 10
    INPUT_FILE = 20
    OUTPUT_FILE = 30
    RUN = 40
    GET_OUTPUT = 50
    # responses
    ACK = 8
    NACK = 9
    OUTPUT = 59

    @property
    def is_response(self) -> bool:
        return self in (MessageType.ACK, MessageType.NACK, MessageType.OUTPUT)


class OutputIndex(IntEnum):
    """Artifact indices understood by `GET_OUTPUT`.

    Output files are numbered in the order they were registered with
    `OUTPUT_FILE`, so `PRIMARY` is the first (and for both backends, the only)
    registered file. The backend's own stdout and stderr are always available.
    """

    PRIMARY = 0
    STDOUT = 254
    STDERR = 255

    @property
    def token(self) -> str:
        """Decimal string sent as the `GET_OUTPUT` message name."""
        return str(int(self))


@dataclass(frozen=True)
class Message:
    """One wire message.

    Name and payload are independently optional. Empty values are stored as
    None as the wire cannot tell them apart.
    """

    type: MessageType
    name: Optional[str] = None
    payload: Optional[bytes] = None

    def __post_init__(self):
        object.__setattr__(self, "type", MessageType(self.type))
        if self.name == "":
            object.__setattr__(self, "name", None)
        if self.payload is not None:
            object.__setattr__(self, "payload", bytes(self.payload) or None)

    @classmethod
    def alive(cls) -> Message:
        return cls(MessageType.ALIVE)

    @classmethod
    def parameter(cls, flag: str, value: Optional[str] = None) -> Message:
        payload = value.encode("ascii") if value is not None else None
        return cls(MessageType.PARAMETER, flag, payload)

    @classmethod
    def input_file(cls, flag: str, contents: bytes) -> Message:
        return cls(MessageType.INPUT_FILE, flag, contents)

    @classmethod
    def output_file(cls, flag: str) -> Message:
        return cls(MessageType.OUTPUT_FILE, flag)

    @classmethod
    def run(cls) -> Message:
        return cls(MessageType.RUN)

    @classmethod
    def get_output(cls, index: Union[OutputIndex, int]) -> Message:
        return cls(MessageType.GET_OUTPUT, str(int(index)))

    def payload_text(self) -> str:
        """Payload decoded as ASCII, undecodable bytes replaced."""
        if self.payload is None:
            return ""
        return self.payload.decode("ascii", errors="replace")

    def __repr__(self):
        msg = f"{self.__class__.__name__}({self.type.name}"
        if self.name is not None:
            msg += f", name={self.name!r}"
        if self.payload is not None:
            if len(self.payload) > _REPR_PAYLOAD_LIMIT:
                msg += f", payload=<{len(self.payload)} bytes>"
            else:
                msg += f", payload={self.payload!r}"
        return msg + ")"
