"""Decoding of event stream payloads into response fragments."""

from __future__ import annotations

from pydantic import ValidationError

from mimo_client.errors import DecodeError
from mimo_client.models import ChatCompletionStreamResponse

TERMINAL_SENTINEL = b"[DONE]"


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def decode_event(payload: bytes) -> ChatCompletionStreamResponse | None:
    """Decode one payload taken from a ``data: `` line.

    Returns None when the payload is the ``[DONE]`` sentinel, which is never
    parsed as JSON. Unknown fields are ignored and missing or null fields
    take their defaults. Values of the wrong JSON type are rejected rather
    than coerced, so a string or boolean slot index is an error.

    Raises:
        DecodeError: The payload is not valid JSON or does not fit the
            fragment shape. Carries the payload verbatim.
    """
    if payload == TERMINAL_SENTINEL:
        return None
    try:
        return ChatCompletionStreamResponse.model_validate_json(payload, strict=True)
    except ValidationError as exc:
        raise DecodeError(payload.decode("utf-8", errors="replace"), _describe(exc)) from exc
