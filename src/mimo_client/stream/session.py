"""Pull-based session over a streaming chat completion response."""

from __future__ import annotations

from enum import Enum

import httpx
import structlog

from mimo_client.errors import MimoError, StreamClosedError, UnexpectedTerminationError
from mimo_client.models import ChatCompletionStreamResponse
from mimo_client.stream.decoder import decode_event
from mimo_client.stream.reader import FrameReader, data_payload

logger = structlog.get_logger()


class StreamState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class ChatCompletionStream:
    """Turns a live event-stream response into typed fragments.

    The session owns the response exclusively and releases it exactly once,
    on the first of: [DONE], end of input, a read or decode failure, or an
    explicit close(). Calls to recv() must be serialized by the caller.

    Usage:
        async with await client.create_chat_completion_stream(request) as stream:
            async for fragment in stream:
                ...
    """

    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self._reader = FrameReader(response.aiter_bytes())
        self._state = StreamState.OPEN
        self._fragments_received = 0
        logger.debug("mimo_stream_opened", status_code=response.status_code)

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is StreamState.CLOSED

    @property
    def fragments_received(self) -> int:
        return self._fragments_received

    @property
    def response(self) -> httpx.Response:
        """The underlying HTTP response (status code and headers)."""
        return self._response

    async def recv(self) -> ChatCompletionStreamResponse:
        """Block until the next fragment arrives.

        Raises:
            StopAsyncIteration: The server sent [DONE]; the stream is closed.
            UnexpectedTerminationError: Input ended without [DONE].
            StreamIOError: Reading the channel failed.
            DecodeError: A data line held a malformed payload. Fatal; the
                frame is not skipped.
            StreamClosedError: The stream was already closed.
        """
        if self._state is StreamState.CLOSED:
            raise StreamClosedError()

        try:
            line = await self._reader.read_line()
            if line is None:
                raise UnexpectedTerminationError()
            fragment = decode_event(data_payload(line))
        except MimoError:
            try:
                await self.close()
            except (httpx.HTTPError, httpx.StreamError, OSError) as close_exc:
                # The read or decode fault stays the one reported
                logger.debug("mimo_stream_close_failed", error=str(close_exc))
            raise

        if fragment is None:
            await self.close()
            raise StopAsyncIteration

        self._fragments_received += 1
        return fragment

    async def close(self) -> None:
        """Release the response. Safe to call any number of times."""
        if self._state is StreamState.CLOSED:
            return
        self._state = StreamState.CLOSED
        await self._response.aclose()
        logger.debug("mimo_stream_closed", fragments_received=self._fragments_received)

    def __aiter__(self) -> ChatCompletionStream:
        return self

    async def __anext__(self) -> ChatCompletionStreamResponse:
        return await self.recv()

    async def __aenter__(self) -> ChatCompletionStream:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
