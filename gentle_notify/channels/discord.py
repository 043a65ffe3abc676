"""
Discord delivery channel.

A fired notification goes to one DiscordTarget: the user named by
``discord_user_id`` in its user_info, or else the center's channel. Sends
report a SendResult instead of raising for Discord-side refusals, so the
center can tell delivered notifications from dropped ones. Anything that is
not a Discord HTTP error propagates to the scheduler's error listener.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass

import discord

logger = logging.getLogger(__name__)

# Set by main.py when the client starts
_bot: discord.Client | None = None

# DMs are serialized and spaced out to stay under Discord's rate limits
_dm_semaphore: asyncio.Semaphore | None = None
DM_INTERVAL_SECONDS = 1.0


class FailureReason(str, enum.Enum):
    no_bot = "no_bot"
    no_target = "no_target"
    invalid_id = "invalid_id"
    not_found = "not_found"
    forbidden = "forbidden"
    http_error = "http_error"


@dataclass(frozen=True)
class SendResult:
    sent: bool
    reason: FailureReason | None = None

    def to_payload(self) -> dict:
        return {"sent": self.sent, "reason": self.reason.value if self.reason else None}


SENT = SendResult(sent=True)


@dataclass(frozen=True)
class DiscordTarget:
    """Where a delivered notification is posted. A user wins over a channel."""

    user_id: str | None = None
    channel_id: str | None = None

    @classmethod
    def from_payload(cls, payload: dict) -> "DiscordTarget":
        user_info = payload["content"].get("user_info") or {}
        user_id = user_info.get("discord_user_id")
        channel_id = payload.get("discord_channel_id")
        return cls(
            user_id=str(user_id) if user_id else None,
            channel_id=str(channel_id) if channel_id else None,
        )

    @property
    def kind(self) -> str | None:
        if self.user_id:
            return "dm"
        if self.channel_id:
            return "channel"
        return None


def set_bot(bot: discord.Client | None) -> None:
    """Set (or clear) the Discord client used for delivery."""
    global _bot, _dm_semaphore
    _bot = bot
    _dm_semaphore = asyncio.Semaphore(1) if bot else None


def is_bot_configured() -> bool:
    return _bot is not None


def _failure(error: discord.HTTPException) -> SendResult:
    if isinstance(error, discord.NotFound):
        return SendResult(False, FailureReason.not_found)
    if isinstance(error, discord.Forbidden):
        return SendResult(False, FailureReason.forbidden)
    return SendResult(False, FailureReason.http_error)


async def send_to_target(target: DiscordTarget, message: str) -> SendResult:
    """
    Post a rendered notification to its target.

    Raises:
        Exceptions other than discord.HTTPException from the client
    """
    if _bot is None:
        return SendResult(False, FailureReason.no_bot)

    snowflake_text = target.user_id or target.channel_id
    if snowflake_text is None:
        return SendResult(False, FailureReason.no_target)
    try:
        snowflake = int(snowflake_text)
    except ValueError:
        return SendResult(False, FailureReason.invalid_id)

    try:
        if target.user_id:
            async with _dm_semaphore:
                user = await _bot.fetch_user(snowflake)
                await user.send(message)
                await asyncio.sleep(DM_INTERVAL_SECONDS)
        else:
            channel = await _bot.fetch_channel(snowflake)
            await channel.send(message)
    except discord.HTTPException as e:
        logger.error(f"Discord {target.kind} send to {snowflake} failed: {e}")
        return _failure(e)

    return SENT
