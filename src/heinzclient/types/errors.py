"""Exceptions raised while talking to the analysis backends."""

from __future__ import annotations

from typing import Optional


class HeinzClientError(Exception):
    """Base exception for everything raised by heinzclient."""

    pass


class CommsError(HeinzClientError):
    """Base exception for communication errors.

    Raised directly for socket level failures (refused connection, reset,
    timeout). The connection is closed before it propagates.
    """

    pass


class FramingError(CommsError):
    """A frame could not be encoded, or the stream held a malformed or
    truncated frame. Fatal for the connection it occurred on."""

    pass


class ProtocolError(CommsError):
    """The backend answered with an unexpected response type or a NACK.

    Fatal for the session: it is abandoned and its connection closed.

    Attributes
    ----------
    diagnostic : str | None
        Text carried by the backend's NACK payload, if any.
    """

    def __init__(self, message: str, diagnostic: Optional[str] = None):
        if diagnostic:
            message = f"{message}: {diagnostic}"
        super().__init__(message)
        self.diagnostic = diagnostic


class OutputParseError(ProtocolError):
    """An output artifact returned by a backend could not be parsed."""

    pass


class ValidationError(HeinzClientError, ValueError):
    """A caller supplied value is out of domain or missing."""

    pass


class InputStateError(HeinzClientError):
    """A result was requested before the step producing it completed, or an
    artifact was requested that was never registered."""

    pass
