"""
In-process stand-in for the fitting and Heinz backends.

`MockBackend` listens on a local TCP port and speaks the wire protocol: it
acknowledges every request, answers `GET_OUTPUT` from a table of canned
artifacts, and can be told to refuse particular requests. Every message it
receives is recorded so tests can check the exact exchange.
"""

from __future__ import annotations

import socketserver
import threading
from typing import Callable, Optional, Union

from loguru import logger

from heinzclient.protocol.codec import encode, read_message
from heinzclient.types import FramingError, Message, MessageType, OutputIndex

NackRule = tuple[MessageType, Optional[str]]
# a script returns a reply message, raw bytes to send before hanging up, or
# None to fall through to the default behaviour
Script = Callable[[Message], Union[Message, bytes, None]]


def fitter_report(lambda_: float, a: float) -> bytes:
    """A report in the format the BUM fitting backend prints to stdout."""
    return (
        "Fitting BUM model...\n"
        f"Mixture parameter (lambda): {lambda_!r}\n"
        f"shape parameter (a): {a!r}\n"
        "Done.\n"
    ).encode("ascii")


class _Handler(socketserver.StreamRequestHandler):
    server: _Server

    def handle(self):
        backend = self.server.backend
        logger.debug("Mock backend accepted connection from {}", self.client_address)
        try:
            while True:
                try:
                    request = read_message(self.rfile)
                except FramingError:
                    break  # client hung up
                reply = backend.reply_to(request)
                if isinstance(reply, bytes):
                    self.wfile.write(reply)
                    self.wfile.flush()
                    break
                self.wfile.write(encode(reply))
                self.wfile.flush()
        finally:
            backend.disconnected.set()
            logger.debug("Mock backend connection from {} ended", self.client_address)


class _Server(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, backend: MockBackend, host: str):
        self.backend = backend
        super().__init__((host, 0), _Handler)


class MockBackend:
    """
    Scriptable backend listening on an ephemeral local port.

    Parameters
    ----------
    outputs : dict[int, bytes] | None, optional
        Artifacts answered to `GET_OUTPUT`, keyed by index. Missing indices
        are answered with a NACK.
    nack : dict[tuple[MessageType, str | None], str] | None, optional
        Requests to refuse, keyed by (type, name), with the diagnostic text.
        A name of None matches any name.
    script : Callable | None, optional
        Called first for every request; see `Script`.
    host : str, optional
        Address to listen on, by default "127.0.0.1"

    Examples
    --------
    ```python
    with MockBackend(outputs={254: fitter_report(0.3, 0.2)}) as backend:
        with FittingSession(*backend.address) as fitter:
            fitter.fit([0.1, 0.2])
    ```
    """

    def __init__(
        self,
        outputs: Optional[dict[int, bytes]] = None,
        nack: Optional[dict[NackRule, str]] = None,
        script: Optional[Script] = None,
        host: str = "127.0.0.1",
    ):
        self.outputs = dict(outputs or {})
        self.nack = dict(nack or {})
        self.script = script
        self.received: list[Message] = []
        self.disconnected = threading.Event()
        self._lock = threading.Lock()
        self._server = _Server(self, host)
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def fitter(
        cls, lambda_: float, a: float, plot_png: Optional[bytes] = None, **kwargs
    ) -> MockBackend:
        """A fitting backend reporting the given parameters (and plot)."""
        outputs = {OutputIndex.STDOUT: fitter_report(lambda_, a)}
        if plot_png is not None:
            outputs[OutputIndex.PRIMARY] = plot_png
        return cls(outputs=outputs, **kwargs)

    @classmethod
    def solver(cls, node_scores: str, **kwargs) -> MockBackend:
        """A Heinz backend whose node score output is `node_scores`."""
        return cls(outputs={OutputIndex.PRIMARY: node_scores.encode("ascii")}, **kwargs)

    @property
    def address(self) -> tuple[str, int]:
        return self._server.server_address[:2]

    def __enter__(self) -> MockBackend:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def start(self) -> None:
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="MockBackend", daemon=True
        )
        self._thread.start()
        logger.debug("Mock backend listening on {}:{}", *self.address)

    def stop(self) -> None:
        if self._thread is not None:
            self._server.shutdown()
            self._thread.join()
            self._thread = None
        self._server.server_close()

    # ------------------------------------------------------------------------

    def requests(self) -> list[tuple[MessageType, Optional[str]]]:
        """(type, name) of every request received so far, in order."""
        with self._lock:
            return [(msg.type, msg.name) for msg in self.received]

    def reply_to(self, request: Message) -> Union[Message, bytes]:
        with self._lock:
            self.received.append(request)
        if self.script is not None:
            reply = self.script(request)
            if reply is not None:
                return reply

        for (msg_type, name), diagnostic in self.nack.items():
            if request.type == msg_type and name in (None, request.name):
                return Message(MessageType.NACK, payload=diagnostic.encode("ascii"))

        if request.type == MessageType.GET_OUTPUT:
            try:
                payload = self.outputs[int(request.name)]
            except (KeyError, TypeError, ValueError):
                return Message(
                    MessageType.NACK, payload=f"No output {request.name}".encode("ascii")
                )
            return Message(MessageType.OUTPUT, payload=payload)
        return Message(MessageType.ACK)
