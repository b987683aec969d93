"""Tests for the ChatCompletionStream state machine."""

import asyncio

import httpx
import pytest

from mimo_client.errors import (
    DecodeError,
    StreamClosedError,
    StreamIOError,
    UnexpectedTerminationError,
)
from mimo_client.stream.session import ChatCompletionStream, StreamState

from helpers import make_stream_response


def _chunk(content: str, index: int = 0, finish_reason: str | None = None) -> str:
    finish = "null" if finish_reason is None else f'"{finish_reason}"'
    return (
        f'data: {{"id":"c1","model":"mimo-v2-flash","choices":[{{"index":{index},'
        f'"delta":{{"content":"{content}"}},"finish_reason":{finish}}}]}}'
    )


@pytest.mark.asyncio
async def test_single_fragment_then_normal_completion():
    response, raw = make_stream_response([
        'data: {"id":"1","choices":[{"index":0,"delta":{"content":"Hi"}}]}',
        "",
        "data: [DONE]",
    ])
    stream = ChatCompletionStream(response)

    fragment = await stream.recv()
    assert len(fragment.choices) == 1
    assert fragment.choices[0].delta.content == "Hi"
    assert stream.state is StreamState.OPEN

    with pytest.raises(StopAsyncIteration):
        await stream.recv()
    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_fragments_arrive_in_order_with_noise_interleaved():
    response, raw = make_stream_response(
        [
            ": keep-alive",
            _chunk("Hello"),
            "",
            "event: ping",
            _chunk(", "),
            ": comment",
            "",
            _chunk("world", finish_reason="stop"),
            "data: [DONE]",
        ],
        chunk_size=7,
    )

    stream = ChatCompletionStream(response)
    texts = [f.choices[0].delta.content async for f in stream]

    assert texts == ["Hello", ", ", "world"]
    assert stream.fragments_received == 3
    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_slots_finish_independently():
    response, _ = make_stream_response([
        _chunk("a", index=0),
        _chunk("b", index=1, finish_reason="stop"),
        _chunk("c", index=0, finish_reason="length"),
        "data: [DONE]",
    ])
    stream = ChatCompletionStream(response)

    fragments = [f async for f in stream]

    assert [(f.choices[0].index, f.choices[0].finish_reason) for f in fragments] == [
        (0, None),
        (1, "stop"),
        (0, "length"),
    ]


@pytest.mark.asyncio
async def test_eof_without_sentinel_is_unexpected_termination():
    response, raw = make_stream_response([_chunk("partial")])
    stream = ChatCompletionStream(response)

    assert (await stream.recv()).choices[0].delta.content == "partial"
    with pytest.raises(UnexpectedTerminationError, match="unexpected end of stream"):
        await stream.recv()

    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_empty_stream_is_unexpected_termination():
    response, raw = make_stream_response([])
    stream = ChatCompletionStream(response)

    with pytest.raises(UnexpectedTerminationError):
        await stream.recv()
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_async_for_surfaces_unexpected_termination():
    response, _ = make_stream_response([_chunk("a"), _chunk("b")])
    stream = ChatCompletionStream(response)
    received = []

    with pytest.raises(UnexpectedTerminationError):
        async for fragment in stream:
            received.append(fragment.choices[0].delta.content)

    assert received == ["a", "b"]


@pytest.mark.asyncio
async def test_malformed_payload_is_fatal_and_closes():
    response, raw = make_stream_response([
        "data: not-json",
        _chunk("never seen"),
        "data: [DONE]",
    ])
    stream = ChatCompletionStream(response)

    with pytest.raises(DecodeError) as exc_info:
        await stream.recv()

    assert "not-json" in exc_info.value.payload
    assert stream.closed
    assert raw.close_count == 1
    with pytest.raises(StreamClosedError):
        await stream.recv()


@pytest.mark.asyncio
async def test_io_error_mid_stream_closes():
    response, raw = make_stream_response(
        [_chunk("a")],
        error=httpx.RemoteProtocolError("peer closed connection"),
    )
    stream = ChatCompletionStream(response)

    await stream.recv()
    with pytest.raises(StreamIOError):
        await stream.recv()

    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_failing_release_keeps_original_fault():
    response, raw = make_stream_response(
        ["data: not-json"],
        close_error=OSError("socket already torn down"),
    )
    stream = ChatCompletionStream(response)

    with pytest.raises(DecodeError):
        await stream.recv()

    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_close_is_idempotent():
    response, raw = make_stream_response([_chunk("a"), "data: [DONE]"])
    stream = ChatCompletionStream(response)

    await stream.close()
    await stream.close()

    assert stream.state is StreamState.CLOSED
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_close_after_fault_does_not_raise():
    response, raw = make_stream_response(["data: {broken"])
    stream = ChatCompletionStream(response)

    with pytest.raises(DecodeError):
        await stream.recv()
    await stream.close()
    await stream.close()

    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_recv_after_completion_raises_closed():
    response, _ = make_stream_response(["data: [DONE]"])
    stream = ChatCompletionStream(response)

    with pytest.raises(StopAsyncIteration):
        await stream.recv()
    with pytest.raises(StreamClosedError):
        await stream.recv()


@pytest.mark.asyncio
async def test_context_manager_releases_on_early_exit():
    response, raw = make_stream_response([_chunk("a"), _chunk("b"), "data: [DONE]"])

    async with ChatCompletionStream(response) as stream:
        first = await stream.recv()

    assert first.choices[0].delta.content == "a"
    assert stream.closed
    assert raw.close_count == 1


@pytest.mark.asyncio
async def test_cancelled_reader_can_still_close():
    """A recv() cancelled while waiting leaves close() to the caller."""
    gate = asyncio.Event()

    class _HangingStream(httpx.AsyncByteStream):
        closed = 0

        async def __aiter__(self):
            await gate.wait()
            yield b"data: [DONE]\n"

        async def aclose(self):
            _HangingStream.closed += 1

    stream = ChatCompletionStream(httpx.Response(200, stream=_HangingStream()))
    task = asyncio.create_task(stream.recv())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    await stream.close()
    assert stream.closed
    assert _HangingStream.closed == 1
