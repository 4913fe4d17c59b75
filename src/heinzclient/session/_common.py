from __future__ import annotations

from functools import wraps
from typing import Callable, TypeVar

from loguru import logger

from heinzclient.types import CommsError

F = TypeVar("F", bound=Callable)


def aborts_session_on_error(func: F) -> F:
    """Decorator for session steps that talk to the backend.

    A communication, framing or protocol failure abandons the session: its
    connection is closed before the error propagates. Caller mistakes
    (validation and state errors) leave the session usable.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except CommsError as e:
            logger.error("{} aborted during {}: {}", self, func.__name__, e)
            self.close()
            raise

    return wrapper
