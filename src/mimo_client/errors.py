"""Exceptions raised by the MiMo client.

Every failure the library reports derives from MimoError. Clean end of a
stream is not an error: ChatCompletionStream.recv() raises StopAsyncIteration.
"""

from __future__ import annotations


class MimoError(Exception):
    """Base class for all client errors."""


class TransportError(MimoError):
    """Request failed before a response body could be consumed.

    Raised for non-success status codes (with whatever the error body told
    us) and for connection-level failures, where status_code is None.
    """

    def __init__(
        self,
        status_code: int | None = None,
        message: str | None = None,
        error_type: str | None = None,
        code: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.code = code
        super().__init__(detail or self._describe())

    def _describe(self) -> str:
        if self.message is None and self.error_type is None and self.code is None:
            return f"api error: status_code={self.status_code}"
        return (
            f"api error: status_code={self.status_code} type={self.error_type or ''} "
            f"code={self.code or ''} message={self.message or ''}"
        )


class StreamIOError(MimoError):
    """Reading from the event stream failed mid-flight."""


class UnexpectedTerminationError(MimoError):
    """The server closed the event stream without sending [DONE]."""

    def __init__(self, detail: str = "unexpected end of stream") -> None:
        super().__init__(detail)


class DecodeError(MimoError):
    """A payload could not be parsed into the expected structure.

    Attributes:
        payload: The offending payload text, verbatim.
        reason: Description of the underlying parse failure.
    """

    def __init__(self, payload: str, reason: str) -> None:
        self.payload = payload
        self.reason = reason
        super().__init__(f"unmarshal error: {reason}, data: {payload}")


class StreamClosedError(MimoError):
    """recv() was called on a stream that is already closed."""

    def __init__(self, detail: str = "stream is closed") -> None:
        super().__init__(detail)
