"""Fold streamed fragments back into a complete chat completion."""

from __future__ import annotations

from dataclasses import dataclass, field

from mimo_client.models import (
    ROLE_ASSISTANT,
    ChatCompletionChoice,
    ChatCompletionMessage,
    ChatCompletionResponse,
    ChatCompletionStreamResponse,
    FunctionCallData,
    ToolCall,
    Usage,
)
from mimo_client.stream.session import ChatCompletionStream


@dataclass(slots=True)
class _SlotBuffer:
    role: str | None = None
    content_parts: list[str] = field(default_factory=list)
    reasoning_parts: list[str] = field(default_factory=list)
    tool_calls: dict[int, ToolCall] = field(default_factory=dict)
    finish_reason: str | None = None


class StreamAccumulator:
    """Merges fragments slot by slot.

    Content and reasoning text are concatenated in arrival order. Tool-call
    pieces are merged by their ``index``: id, type and name come from the
    first piece carrying them, argument pieces are appended.
    """

    def __init__(self) -> None:
        self._id = ""
        self._created = 0
        self._model = ""
        self._usage: Usage | None = None
        self._slots: dict[int, _SlotBuffer] = {}

    def add(self, fragment: ChatCompletionStreamResponse) -> None:
        self._id = self._id or fragment.id
        self._created = self._created or fragment.created
        self._model = self._model or fragment.model
        if fragment.usage is not None:
            self._usage = fragment.usage

        for choice in fragment.choices:
            slot = self._slots.setdefault(choice.index, _SlotBuffer())
            delta = choice.delta
            if delta.role and slot.role is None:
                slot.role = delta.role
            if delta.content:
                slot.content_parts.append(delta.content)
            if delta.reasoning_content:
                slot.reasoning_parts.append(delta.reasoning_content)
            for position, piece in enumerate(delta.tool_calls or []):
                self._merge_tool_call(slot, piece, position)
            if choice.finish_reason:
                slot.finish_reason = choice.finish_reason

    @staticmethod
    def _merge_tool_call(slot: _SlotBuffer, piece: ToolCall, position: int) -> None:
        key = piece.index if piece.index is not None else position
        current = slot.tool_calls.get(key)
        if current is None:
            slot.tool_calls[key] = ToolCall(
                index=key,
                id=piece.id,
                type=piece.type,
                function=FunctionCallData(
                    name=piece.function.name,
                    arguments=piece.function.arguments or "",
                ),
            )
            return
        current.id = current.id or piece.id
        current.type = current.type or piece.type
        current.function.name = current.function.name or piece.function.name
        if piece.function.arguments:
            current.function.arguments = (current.function.arguments or "") + piece.function.arguments

    def result(self) -> ChatCompletionResponse:
        choices = []
        for index in sorted(self._slots):
            slot = self._slots[index]
            tool_calls = [slot.tool_calls[k] for k in sorted(slot.tool_calls)]
            choices.append(
                ChatCompletionChoice(
                    index=index,
                    message=ChatCompletionMessage(
                        role=slot.role or ROLE_ASSISTANT,
                        content="".join(slot.content_parts),
                        reasoning_content="".join(slot.reasoning_parts) if slot.reasoning_parts else None,
                        tool_calls=tool_calls or None,
                    ),
                    finish_reason=slot.finish_reason,
                )
            )
        return ChatCompletionResponse(
            id=self._id,
            object="chat.completion",
            created=self._created,
            model=self._model,
            choices=choices,
            usage=self._usage or Usage(),
        )


async def accumulate_stream(stream: ChatCompletionStream) -> ChatCompletionResponse:
    """Drain a stream into one response. The stream is always closed.

    Stream errors propagate unchanged; nothing partial is returned.
    """
    accumulator = StreamAccumulator()
    async with stream:
        async for fragment in stream:
            accumulator.add(fragment)
    return accumulator.result()
