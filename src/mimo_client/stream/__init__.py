"""Event stream handling for streamed chat completions."""

from mimo_client.stream.accumulator import StreamAccumulator, accumulate_stream
from mimo_client.stream.decoder import TERMINAL_SENTINEL, decode_event
from mimo_client.stream.reader import DATA_PREFIX, FrameReader, data_payload
from mimo_client.stream.session import ChatCompletionStream, StreamState

__all__ = [
    "ChatCompletionStream",
    "DATA_PREFIX",
    "FrameReader",
    "StreamAccumulator",
    "StreamState",
    "TERMINAL_SENTINEL",
    "accumulate_stream",
    "data_payload",
    "decode_event",
]
