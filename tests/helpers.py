"""Shared helpers for faking event-stream HTTP responses."""

import httpx


class FakeByteStream(httpx.AsyncByteStream):
    """Async byte stream that records how often it was closed.

    Optionally raises ``error`` after the last chunk, simulating a
    connection dropped mid-stream, and ``close_error`` from aclose().
    """

    def __init__(
        self,
        chunks: list[bytes],
        error: Exception | None = None,
        close_error: Exception | None = None,
    ) -> None:
        self._chunks = chunks
        self._error = error
        self._close_error = close_error
        self.close_count = 0

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        if self._error is not None:
            raise self._error

    async def aclose(self) -> None:
        self.close_count += 1
        if self._close_error is not None:
            raise self._close_error


def sse_body(lines: list[str]) -> bytes:
    """Join event-stream lines with newline terminators."""
    return "".join(line + "\n" for line in lines).encode("utf-8")


def split_chunks(data: bytes, size: int) -> list[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


def make_stream_response(
    lines: list[str],
    *,
    chunk_size: int | None = None,
    error: Exception | None = None,
    close_error: Exception | None = None,
    status_code: int = 200,
) -> tuple[httpx.Response, FakeByteStream]:
    """Build a streaming httpx.Response over the given event-stream lines."""
    body = sse_body(lines)
    chunks = split_chunks(body, chunk_size) if chunk_size else [body]
    stream = FakeByteStream(chunks, error=error, close_error=close_error)
    response = httpx.Response(
        status_code,
        headers={"content-type": "text/event-stream"},
        stream=stream,
    )
    return response, stream
