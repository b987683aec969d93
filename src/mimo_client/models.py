"""Data models for MiMo chat completion requests and responses."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLE_TOOL = "tool"

TOOL_TYPE_FUNCTION = "function"


class FunctionDefinition(BaseModel):
    """Metadata of a function the model may call."""

    name: str
    description: str | None = None
    parameters: dict[str, Any] = Field(
        default_factory=dict,
        description="JSON Schema object describing the arguments",
    )


class Tool(BaseModel):
    """A tool made available to the model."""

    type: str = TOOL_TYPE_FUNCTION
    function: FunctionDefinition


class FunctionCallData(BaseModel):
    """Name and JSON-encoded arguments of a function call.

    In streamed deltas both fields arrive in pieces; arguments must be
    concatenated across fragments.
    """

    name: str | None = None
    arguments: str | None = None


class ToolCall(BaseModel):
    """A tool invocation generated by the model.

    ``index`` is only present in streamed deltas, where it identifies which
    call a partial record belongs to.
    """

    index: int | None = None
    id: str | None = None
    type: str | None = None
    function: FunctionCallData = Field(default_factory=FunctionCallData)


class ChatCompletionMessage(BaseModel):
    """A single message of the conversation history."""

    role: str
    content: str | None = ""
    name: str | None = None
    # Chain-of-thought text produced in thinking mode
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None


class ThinkingConfig(BaseModel):
    """Switches the model's deep-thinking mode on or off."""

    model_config = ConfigDict(frozen=True)

    type: Literal["enabled", "disabled"]


THINKING_ENABLED = ThinkingConfig(type="enabled")
THINKING_DISABLED = ThinkingConfig(type="disabled")


class ChatCompletionRequest(BaseModel):
    """Body of a POST /chat/completions call.

    Optional fields left as None are omitted from the wire payload.
    """

    model: str
    messages: list[ChatCompletionMessage]
    max_tokens: int | None = None
    max_completion_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    stream: bool = False
    stop: list[str] | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    thinking: ThinkingConfig | None = None
    tools: list[Tool] | None = None
    # "none", "auto", "required" or a specific tool object
    tool_choice: str | dict[str, Any] | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON-ready dict sent on the wire."""
        return self.model_dump(mode="json", exclude_none=True)


class Usage(BaseModel):
    """Token usage statistics."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    @field_validator("prompt_tokens", "completion_tokens", "total_tokens", mode="before")
    @classmethod
    def null_count(cls, v: Any) -> Any:
        return 0 if v is None else v


class ChatCompletionChoice(BaseModel):
    """One generated candidate of a non-streaming response."""

    index: int = 0
    message: ChatCompletionMessage = Field(
        default_factory=lambda: ChatCompletionMessage(role=ROLE_ASSISTANT)
    )
    finish_reason: str | None = None

    @field_validator("index", mode="before")
    @classmethod
    def null_index(cls, v: Any) -> Any:
        return 0 if v is None else v


class ChatCompletionResponse(BaseModel):
    """Full response of a non-streaming chat completion."""

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionChoice] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    @field_validator("id", "object", "model", mode="before")
    @classmethod
    def null_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("created", mode="before")
    @classmethod
    def null_created(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("choices", mode="before")
    @classmethod
    def null_choices(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("usage", mode="before")
    @classmethod
    def null_usage(cls, v: Any) -> Any:
        return Usage() if v is None else v


class ChatCompletionStreamChoiceDelta(BaseModel):
    """Incremental update to one generation slot."""

    role: str | None = None
    content: str | None = None
    # MiMo-specific field carrying thinking-mode text
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] | None = None


class ChatCompletionStreamChoice(BaseModel):
    """Per-slot delta of a streamed fragment.

    A populated finish_reason means the slot receives no further deltas.
    """

    index: int = 0
    delta: ChatCompletionStreamChoiceDelta = Field(default_factory=ChatCompletionStreamChoiceDelta)
    finish_reason: str | None = None

    @field_validator("index", mode="before")
    @classmethod
    def null_index(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("delta", mode="before")
    @classmethod
    def null_delta(cls, v: Any) -> Any:
        return ChatCompletionStreamChoiceDelta() if v is None else v


class ChatCompletionStreamResponse(BaseModel):
    """One decoded fragment of a streamed chat completion.

    A JSON null in any field decodes as that field's zero value.
    """

    id: str = ""
    object: str = ""
    created: int = 0
    model: str = ""
    choices: list[ChatCompletionStreamChoice] = Field(default_factory=list)
    usage: Usage | None = None

    @field_validator("id", "object", "model", mode="before")
    @classmethod
    def null_text(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("created", mode="before")
    @classmethod
    def null_created(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("choices", mode="before")
    @classmethod
    def null_choices(cls, v: Any) -> Any:
        return [] if v is None else v


class APIErrorDetail(BaseModel):
    message: str | None = None
    type: str | None = None
    code: str | int | None = None


class ErrorResponse(BaseModel):
    """Error body returned with non-success status codes."""

    error: APIErrorDetail
