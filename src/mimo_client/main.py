"""Command-line entrypoint - send one prompt to MiMo and print the reply."""

import argparse
import asyncio
import logging
import sys
from typing import TextIO

import structlog

from mimo_client.client import MimoClient
from mimo_client.config import Settings, get_settings
from mimo_client.errors import MimoError
from mimo_client.models import (
    ROLE_SYSTEM,
    ROLE_USER,
    THINKING_DISABLED,
    THINKING_ENABLED,
    ChatCompletionMessage,
    ChatCompletionRequest,
)


def configure_logging(
    log_level: str = "INFO",
    log_file: str = "",
    log_file_max_bytes: int = 10_485_760,
    log_file_backup_count: int = 5,
) -> None:
    """Configure structlog and standard library logging.

    Console output goes to stderr; stdout carries only the model's reply.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file. Empty string = console only.
        log_file_max_bytes: Max size per log file before rotation (default: 10 MB)
        log_file_backup_count: Number of rotated backup files to keep (default: 5)
    """
    from logging.handlers import RotatingFileHandler
    from pathlib import Path

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.root
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=log_file,
            maxBytes=log_file_max_bytes,
            backupCount=log_file_backup_count,
            encoding="utf-8",
        ))
    for handler in handlers:
        handler.setLevel(level)
        # structlog renders the whole line
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    # One renderer serves every handler: with a log file, stderr gets JSON lines too
    renderer = structlog.processors.JSONRenderer() if log_file else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mimo-chat",
        description="Send a prompt to the MiMo chat completions API.",
    )
    parser.add_argument("prompt", help="User message to send.")
    parser.add_argument("--model", default=None, help="Model name (default: MIMO_MODEL).")
    parser.add_argument("--system", default=None, help="Optional system prompt.")
    parser.add_argument("--no-stream", action="store_true", help="Wait for the full reply instead of streaming.")
    parser.add_argument(
        "--thinking",
        choices=["enabled", "disabled"],
        default=None,
        help="Turn deep-thinking mode on or off.",
    )
    parser.add_argument("--max-tokens", type=int, default=None)
    parser.add_argument("--temperature", type=float, default=None)
    return parser


def build_request(args: argparse.Namespace, settings: Settings) -> ChatCompletionRequest:
    messages = []
    if args.system:
        messages.append(ChatCompletionMessage(role=ROLE_SYSTEM, content=args.system))
    messages.append(ChatCompletionMessage(role=ROLE_USER, content=args.prompt))

    thinking = None
    if args.thinking == "enabled":
        thinking = THINKING_ENABLED
    elif args.thinking == "disabled":
        thinking = THINKING_DISABLED

    return ChatCompletionRequest(
        model=args.model or settings.mimo_model,
        messages=messages,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
        thinking=thinking,
    )


async def run_chat(
    client: MimoClient,
    request: ChatCompletionRequest,
    *,
    stream: bool = True,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> None:
    """Send the request and write the reply.

    Content of the first slot goes to ``out``; thinking-mode text goes to
    ``err`` so the reply can be piped on its own.
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    if not stream:
        response = await client.create_chat_completion(request)
        if response.choices:
            message = response.choices[0].message
            if message.reasoning_content:
                err.write(message.reasoning_content + "\n")
            out.write((message.content or "") + "\n")
        return

    async with await client.create_chat_completion_stream(request) as chat_stream:
        async for fragment in chat_stream:
            for choice in fragment.choices:
                if choice.index != 0:
                    continue
                if choice.delta.reasoning_content:
                    err.write(choice.delta.reasoning_content)
                    err.flush()
                if choice.delta.content:
                    out.write(choice.delta.content)
                    out.flush()
        logger.debug("mimo_cli_stream_done", fragments=chat_stream.fragments_received)
    out.write("\n")


async def _main(args: argparse.Namespace, settings: Settings) -> int:
    request = build_request(args, settings)
    async with MimoClient(settings.client_config()) as client:
        try:
            await run_chat(client, request, stream=not args.no_stream)
        except MimoError as e:
            logger.error("mimo_chat_failed", error=str(e), error_class=type(e).__name__)
            return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the mimo-chat command."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        log_file=settings.log_file,
        log_file_max_bytes=settings.log_file_max_bytes,
        log_file_backup_count=settings.log_file_backup_count,
    )
    return asyncio.run(_main(args, settings))


if __name__ == "__main__":
    sys.exit(main())
