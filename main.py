"""
Unified backend entry point.

Architecture:
- One Python process, one asyncio event loop
- Peer services running concurrently:
  1. FastAPI (HTTP API for scheduling and cancelling notifications)
  2. Notification center (APScheduler jobs that fire and deliver notifications)
  3. Discord client (optional delivery channel)

The FastAPI lifespan starts and stops the peers, which gives us uvicorn's
signal handling for free.

Run with: python main.py [--no-bot] [--port PORT]
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv

project_root = Path(__file__).parent

# Load .env.local first (if exists), then .env as fallback
# .env.local is gitignored and used for local dev overrides
load_dotenv(project_root / ".env.local")  # Local overrides (gitignored)
load_dotenv()  # Fallback to .env

import discord
import sentry_sdk
from fastapi import FastAPI

from gentle_notify.channels.discord import set_bot
from gentle_notify.client import create_default_client
from gentle_notify.config import (
    get_api_port,
    get_discord_bot_token,
    get_sentry_dsn,
    is_discord_bot_disabled,
)
from web_api.routes.notifications import router as notifications_router

logger = logging.getLogger(__name__)

# Track bot task for cleanup
_bot_task: asyncio.Task | None = None


def create_bot() -> discord.Client:
    """Create the Discord client used only for sending notifications."""
    return discord.Client(intents=discord.Intents.default())


async def start_bot(bot: discord.Client) -> None:
    """
    Start Discord client (non-blocking).

    Uses bot.start() instead of bot.run() so it can run
    alongside FastAPI in the same event loop.
    """
    token = get_discord_bot_token()
    if not token:
        logger.warning("DISCORD_BOT_TOKEN not set, notifications will be logged only")
        return

    set_bot(bot)
    try:
        await bot.start(token)
    except Exception as e:
        logger.error(f"Discord bot error: {e}")
        set_bot(None)
        raise


async def stop_bot(bot: discord.Client | None) -> None:
    """Stop Discord client gracefully."""
    set_bot(None)
    if bot and not bot.is_closed():
        await bot.close()
        logger.info("Discord bot stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager.

    Starts the notification center and (optionally) the Discord client,
    and exposes the notification client on app.state.
    """
    global _bot_task

    client, center = create_default_client()
    center.start()
    app.state.notification_client = client

    bot = None
    if is_discord_bot_disabled():
        logger.info("Discord bot disabled (--no-bot flag or DISABLE_DISCORD_BOT=true)")
    else:
        bot = create_bot()
        _bot_task = asyncio.create_task(start_bot(bot))

    yield  # FastAPI runs here, peers run alongside it

    logger.info("Shutting down peer services...")
    await stop_bot(bot)
    if _bot_task:
        _bot_task.cancel()
        try:
            await _bot_task
        except (asyncio.CancelledError, Exception):
            pass  # Already reported by start_bot
    center.shutdown()
    app.state.notification_client = None


if get_sentry_dsn():
    sentry_sdk.init(dsn=get_sentry_dsn())

app = FastAPI(
    title="Gentle Notify API",
    lifespan=lifespan,
)

app.include_router(notifications_router)


@app.get("/health")
async def health():
    """Health check endpoint with detailed status."""
    client = getattr(app.state, "notification_client", None)
    return {
        "status": "healthy",
        "notification_center_running": bool(
            client and getattr(client.center, "running", False)
        ),
    }


if __name__ == "__main__":
    import argparse
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Gentle Notify Server")
    parser.add_argument(
        "--no-bot",
        action="store_true",
        help="Disable Discord delivery (notifications are logged instead)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=get_api_port(),
        help="Port to run the server on (default: API_PORT or 8000)",
    )
    args = parser.parse_args()

    # Set env var so it persists across uvicorn reloads
    if args.no_bot:
        os.environ["DISABLE_DISCORD_BOT"] = "true"

    # Pass app object directly (not string) to avoid module reimport issues
    uvicorn.run(
        app,
        host="0.0.0.0",
        port=args.port,
    )
