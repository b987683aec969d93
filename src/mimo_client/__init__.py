"""Async client for the MiMo chat completions API."""

from mimo_client.client import MimoClient
from mimo_client.config import ClientConfig, Settings, get_settings
from mimo_client.errors import (
    DecodeError,
    MimoError,
    StreamClosedError,
    StreamIOError,
    TransportError,
    UnexpectedTerminationError,
)
from mimo_client.models import (
    THINKING_DISABLED,
    THINKING_ENABLED,
    ChatCompletionMessage,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatCompletionStreamResponse,
    Tool,
    ToolCall,
)
from mimo_client.stream import ChatCompletionStream, StreamAccumulator, accumulate_stream

__all__ = [
    "ChatCompletionMessage",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatCompletionStream",
    "ChatCompletionStreamResponse",
    "ClientConfig",
    "DecodeError",
    "MimoClient",
    "MimoError",
    "Settings",
    "StreamAccumulator",
    "StreamClosedError",
    "StreamIOError",
    "THINKING_DISABLED",
    "THINKING_ENABLED",
    "Tool",
    "ToolCall",
    "TransportError",
    "UnexpectedTerminationError",
    "accumulate_stream",
    "get_settings",
]
