"""Line framing for server-sent event streams."""

from __future__ import annotations

from collections.abc import AsyncIterable

import httpx

from mimo_client.errors import StreamIOError

DATA_PREFIX = b"data: "


def data_payload(line: bytes) -> bytes:
    """Strip the data field tag from a data-bearing line."""
    return line[len(DATA_PREFIX):]


class FrameReader:
    """Pulls data-bearing lines out of a byte channel.

    Lines are split on ``\\n`` and trimmed. Anything that does not start with
    ``data: `` (blank separators, ``:`` keep-alive comments, ``event:``/``id:``
    fields) is dropped here and never reaches the caller. A trailing line
    without a terminator is still classified once the channel is exhausted.
    """

    def __init__(self, chunks: AsyncIterable[bytes]) -> None:
        self._chunks = aiter(chunks)
        self._buffer = bytearray()
        self._exhausted = False

    async def read_line(self) -> bytes | None:
        """Return the next trimmed ``data: `` line, or None at end of input.

        Raises:
            StreamIOError: The underlying channel failed. Not retried.
        """
        while True:
            raw = await self._next_raw_line()
            if raw is None:
                return None
            line = raw.strip()
            if line.startswith(DATA_PREFIX):
                return line

    async def _next_raw_line(self) -> bytes | None:
        while True:
            newline = self._buffer.find(b"\n")
            if newline >= 0:
                line = bytes(self._buffer[:newline])
                del self._buffer[: newline + 1]
                return line

            if self._exhausted:
                if not self._buffer:
                    return None
                line = bytes(self._buffer)
                self._buffer.clear()
                return line

            try:
                chunk = await anext(self._chunks)
            except StopAsyncIteration:
                self._exhausted = True
                continue
            except (httpx.HTTPError, httpx.StreamError, OSError) as exc:
                raise StreamIOError(f"read error: {exc}") from exc
            self._buffer.extend(chunk)
