"""Async client for the MiMo chat completions API."""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from mimo_client.config import ClientConfig
from mimo_client.errors import DecodeError, TransportError
from mimo_client.models import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ErrorResponse,
)
from mimo_client.stream.session import ChatCompletionStream

logger = structlog.get_logger()

CHAT_COMPLETIONS_PATH = "/chat/completions"

# MiMo authenticates with this header instead of "Authorization: Bearer"
API_KEY_HEADER = "api-key"


def _is_success(status_code: int) -> bool:
    return 200 <= status_code < 400


async def _error_from_response(response: httpx.Response) -> TransportError:
    """Build a TransportError from a non-success response and close it.

    The error body is parsed best-effort; when it cannot be read or does not
    look like ``{"error": {...}}`` only the status code is reported.
    """
    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError):
        body = b""
    finally:
        await response.aclose()

    try:
        parsed = ErrorResponse.model_validate_json(body)
    except ValidationError:
        return TransportError(status_code=response.status_code)

    error = parsed.error
    return TransportError(
        status_code=response.status_code,
        message=error.message,
        error_type=error.type,
        code=str(error.code) if error.code is not None else None,
    )


class MimoClient:
    """Client for the MiMo OpenAI-compatible chat completions endpoint.

    Offers a single-shot call (create_chat_completion) and a streamed one
    (create_chat_completion_stream) that hands back a ChatCompletionStream.
    No retries are performed.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @classmethod
    def from_api_key(cls, api_key: str) -> MimoClient:
        """Client for the public endpoint with default settings."""
        return cls(ClientConfig.default(api_key))

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=self._config.timeout)
            self._owns_http_client = True
        return self._http_client

    def _endpoint(self) -> str:
        return self._config.base_url.rstrip("/") + CHAT_COMPLETIONS_PATH

    def _build_request(
        self,
        client: httpx.AsyncClient,
        request: ChatCompletionRequest,
        *,
        stream: bool,
    ) -> httpx.Request:
        """Serialize the body and attach protocol and auth headers."""
        payload = request.model_copy(update={"stream": stream}).to_payload()
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            API_KEY_HEADER: self._config.api_key,
        }
        if stream:
            headers["Accept"] = "text/event-stream"
            headers["Cache-Control"] = "no-cache"
            headers["Connection"] = "keep-alive"
        return client.build_request("POST", self._endpoint(), json=payload, headers=headers)

    async def _send(self, request: ChatCompletionRequest, *, stream: bool) -> httpx.Response:
        """Send the request and return the unread response on success.

        Raises:
            TransportError: Connection failure, or a status outside [200, 400).
        """
        client = await self._get_http_client()
        http_request = self._build_request(client, request, stream=stream)
        try:
            response = await client.send(http_request, stream=True)
        except httpx.TransportError as exc:
            raise TransportError(detail=f"request failed: {exc}") from exc

        if not _is_success(response.status_code):
            raise await _error_from_response(response)
        return response

    async def create_chat_completion(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionResponse:
        """Run a non-streaming chat completion.

        Args:
            request: The request; its stream flag is forced off.

        Returns:
            The decoded response.

        Raises:
            TransportError: The request failed or the server returned an error.
            DecodeError: The body is empty or not a valid response object.
        """
        logger.info(
            "mimo_chat_start",
            model=request.model,
            message_count=len(request.messages),
            stream=False,
        )

        response = await self._send(request, stream=False)
        try:
            body = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise TransportError(
                status_code=response.status_code,
                detail=f"read error: status_code={response.status_code}: {exc}",
            ) from exc
        finally:
            await response.aclose()

        if not body.strip():
            raise DecodeError("", "empty response body")
        try:
            result = ChatCompletionResponse.model_validate_json(body, strict=True)
        except ValidationError as exc:
            raise DecodeError(body.decode("utf-8", errors="replace"), str(exc)) from exc

        logger.info(
            "mimo_chat_complete",
            model=result.model,
            choice_count=len(result.choices),
            finish_reason=result.choices[0].finish_reason if result.choices else None,
            total_tokens=result.usage.total_tokens,
        )
        return result

    async def create_chat_completion_stream(
        self, request: ChatCompletionRequest
    ) -> ChatCompletionStream:
        """Open a streamed chat completion.

        The returned stream owns the HTTP response; the caller must close it
        (or use it as an async context manager), including on cancellation.

        Raises:
            TransportError: The request failed or the server returned an
                error. No stream is opened in that case.
        """
        logger.info(
            "mimo_stream_start",
            model=request.model,
            message_count=len(request.messages),
            stream=True,
        )
        response = await self._send(request, stream=True)
        return ChatCompletionStream(response)

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and self._http_client and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def __aenter__(self) -> MimoClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
