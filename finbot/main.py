"""Keep-alive HTTP server and command-line entry point"""
import argparse
import asyncio
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from finbot.bot import MessageProcessor
from finbot.channel import ConsoleChannel, InboundMessage
from finbot.config import settings
from finbot.logger import create_logger
from finbot.state import AppState

# Create logger for main module
logger = create_logger("main")

CONSOLE_CHAT_ID = "console"


async def root(request: Request):
    """Banner for uptime pings"""
    return PlainTextResponse("Bot financeiro está rodando!")


async def status(request: Request):
    """Liveness details"""
    state: AppState = request.app.state.finbot
    return JSONResponse({
        "status": "online",
        "uptime": state.uptime(),
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "entries": len(state.ledger),
    })


def create_app(state: AppState) -> Starlette:
    """ASGI app that keeps the hosting platform from idling the process"""

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info("HTTP server started")
        yield
        state.close()

    app = Starlette(
        routes=[
            Route("/", root, methods=["GET"]),
            Route("/status", status, methods=["GET"]),
        ],
        lifespan=lifespan,
    )
    app.state.finbot = state
    return app


async def run_console(state: AppState, contact: Optional[str] = None) -> None:
    """
    Feed stdin lines to the bot as chat messages.

    Lines are sent as the owner unless `contact` is given, in which case they
    arrive from that contact (who must be on the allow-list to get replies).
    """
    processor = MessageProcessor(state, ConsoleChannel())
    is_self = contact is None
    sender_id = CONSOLE_CHAT_ID if is_self else f"{contact}@c.us"
    loop = asyncio.get_running_loop()

    while True:
        line = await loop.run_in_executor(None, sys.stdin.readline)
        if not line:
            break
        text = line.rstrip("\n")
        if not text.strip():
            continue
        await processor.handle_message(InboundMessage(
            text=text,
            sender_id=sender_id,
            chat_id=sender_id,
            is_self=is_self,
        ))


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="finbot",
        description="Personal finance tracker operated through chat messages",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    serve = subcommands.add_parser("serve", help="Run the keep-alive HTTP server")
    serve.add_argument("--host", default=None, help="Bind address (default: HTTP_HOST)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: HTTP_PORT)")

    console = subcommands.add_parser("console", help="Talk to the bot from the terminal")
    console.add_argument(
        "--as",
        dest="contact",
        default=None,
        help="Send messages as this contact number instead of the owner",
    )

    args = parser.parse_args(argv)

    # Validate settings on startup
    settings.validate_settings()
    state = AppState.load(settings)

    if args.command == "serve":
        import uvicorn
        uvicorn.run(
            create_app(state),
            host=args.host or settings.http_host,
            port=args.port or settings.http_port,
        )
        return

    try:
        asyncio.run(run_console(state, args.contact))
    finally:
        state.close()


if __name__ == "__main__":
    main()
