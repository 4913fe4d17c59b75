"""
A single persistent connection to an analysis backend.

The connection enforces strict request/response alternation: every request is
answered by exactly one response before the next request may be sent. It is
opened lazily on first use, probes the backend with `ALIVE` before any other
traffic, and may be closed any number of times.

Any failure below the protocol level (socket error, timeout, malformed frame)
closes the connection before the exception propagates. A closed connection is
never reopened: start a fresh session instead.
"""

from __future__ import annotations

import socket
from typing import BinaryIO, Optional, Union

from loguru import logger

from heinzclient.types import (
    CommsError,
    FramingError,
    Message,
    MessageType,
    OutputIndex,
    ProtocolError,
)
from heinzclient.util import DEFAULT_TIMEOUT

from .codec import encode, read_message


class Connection:
    """
    Client end of one duplex byte stream to a backend process.

    Parameters
    ----------
    host : str
        Host name or address of the backend.
    port : int
        TCP port the backend listens on.
    timeout : float | None, optional
        Seconds any single socket operation may block, RUN included. None
        (default) blocks until the backend answers; the protocol has no way to
        cancel a run, so this is the only bound on its duration.

    Examples
    --------
    ```python
    with Connection("localhost", 9001) as conn:
        conn.send_and_ack(Message.parameter("-p"))
        conn.send_and_ack(Message.run())
        output = conn.fetch_output(OutputIndex.PRIMARY)
    ```
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._reader: Optional[BinaryIO] = None
        self._awaiting_response = False
        self._closed = False

    def __repr__(self):
        if self._closed:
            state = "closed"
        elif self._sock is not None:
            state = "open"
        else:
            state = "unopened"
        return f"{self.__class__.__name__}({self.host}:{self.port}, {state})"

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def is_open(self) -> bool:
        return self._sock is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------------

    def open(self) -> None:
        """Connect and confirm the backend answers `ALIVE` with `ACK`.

        Does nothing if already open.

        Raises
        ------
        CommsError
            If the backend cannot be reached, or the connection was closed.
        ProtocolError
            If the backend does not acknowledge the liveness probe.
        """
        if self._closed:
            raise CommsError(f"{self!r} cannot be reopened, start a new session.")
        if self._sock is not None:
            return

        logger.info("Connecting to backend at {}:{}...", self.host, self.port)
        try:
            self._sock = socket.create_connection(
                (self.host, self.port), timeout=self.timeout
            )
            self._reader = self._sock.makefile("rb")
        except OSError as e:
            self.close()
            logger.error("Could not connect to {}:{}: {}", self.host, self.port, e)
            raise CommsError(
                f"Could not connect to backend at {self.host}:{self.port}: {e}"
            ) from e

        self._write(Message.alive())
        response = self._read()
        if response.type != MessageType.ACK:
            self.close()
            logger.error("Bad response from backend to liveness probe: {}", response)
            raise ProtocolError(
                f"Backend at {self.host}:{self.port} did not acknowledge ALIVE "
                f"(got {response.type.name})",
                response.payload_text() or None,
            )
        logger.info("Connected to backend at {}:{}.", self.host, self.port)

    def close(self) -> None:
        """Close the connection. Safe to call any number of times."""
        if self._closed:
            return
        self._closed = True
        self._awaiting_response = False
        reader, sock = self._reader, self._sock
        self._reader = None
        self._sock = None
        if reader is not None:
            reader.close()
        if sock is not None:
            try:
                sock.close()
            except OSError as e:
                logger.warning("Error closing socket to {}:{}: {}", self.host, self.port, e)
            logger.info("Closed connection to {}:{}.", self.host, self.port)

    # ------------------------------------------------------------------------

    def _write(self, message: Message) -> None:
        frame = encode(message)
        logger.debug("*REQUEST* (client->): {}", message)
        try:
            self._sock.sendall(frame)
        except OSError as e:
            self.close()
            logger.error("Error sending {}: {}", message, e)
            raise CommsError(f"Error sending {message.type.name}: {e}") from e
        self._awaiting_response = True

    def _read(self) -> Message:
        logger.trace("*RESPONSE* (client<-) Waiting for response...")
        try:
            response = read_message(self._reader)
        except FramingError as e:
            self.close()
            logger.error("Framing error, connection aborted: {}", e)
            raise
        except OSError as e:
            self.close()
            logger.error("Error receiving response: {}", e)
            raise CommsError(f"Error receiving response: {e}") from e
        if not response.type.is_response:
            self.close()
            logger.error("Backend sent a request instead of a response: {}", response)
            raise ProtocolError(f"Backend sent {response.type.name} as a response")
        self._awaiting_response = False
        logger.debug("*RESPONSE* (client<-): {}", response)
        return response

    def send(self, message: Message) -> None:
        """Send one request, opening the connection first if needed.

        Raises
        ------
        ProtocolError
            If a response to the previous request is still outstanding.
        """
        if self._awaiting_response:
            raise ProtocolError(
                f"Cannot send {message.type.name}: previous response not yet received"
            )
        self.open()
        self._write(message)

    def receive(self) -> Message:
        """Receive the response to the last request sent.

        Raises
        ------
        ProtocolError
            If no request is awaiting a response.
        """
        if not self._awaiting_response:
            raise ProtocolError("No request is awaiting a response")
        return self._read()

    def send_and_receive(self, message: Message) -> Message:
        """Send a request and return its response, whatever its type."""
        self.send(message)
        return self.receive()

    def send_and_ack(self, message: Message) -> None:
        """Send a request that must be acknowledged.

        Raises
        ------
        ProtocolError
            If the backend answers with anything but `ACK`. A NACK's payload is
            attached as the diagnostic text.
        """
        response = self.send_and_receive(message)
        if response.type == MessageType.ACK:
            return
        diagnostic = response.payload_text() or None
        if response.type == MessageType.NACK:
            logger.error("Backend refused {}: {}", message, diagnostic)
            raise ProtocolError(f"Backend refused {_describe(message)}", diagnostic)
        logger.error("Unexpected response to {}: {}", message, response)
        raise ProtocolError(
            f"Expected ACK for {_describe(message)}, got {response.type.name}",
            diagnostic,
        )

    def fetch_output(self, index: Union[OutputIndex, int]) -> bytes:
        """Retrieve an output artifact.

        Returns
        -------
        bytes
            The artifact contents, verbatim (empty if the artifact is empty).

        Raises
        ------
        ProtocolError
            If the backend does not answer with `OUTPUT`.
        """
        request = Message.get_output(index)
        response = self.send_and_receive(request)
        if response.type != MessageType.OUTPUT:
            diagnostic = response.payload_text() or None
            logger.error("No output {} received: {}", request.name, response)
            raise ProtocolError(
                f"No output {request.name} received from backend "
                f"(got {response.type.name})",
                diagnostic,
            )
        return response.payload or b""


def _describe(message: Message) -> str:
    if message.name is None:
        return message.type.name
    return f"{message.type.name} {message.name!r}"
