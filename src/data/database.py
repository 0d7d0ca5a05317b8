# data/database.py
"""
Read-only access to the leveling tables.

The bot never writes here: XP rows and card customizations are owned by
whatever awards XP and edits cards. Every query runs in a worker thread, behind
a small concurrency cap, and is retried on transport hiccups.
"""
import asyncio
import os
import random
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

import httpcore
import httpx
from dotenv import load_dotenv
from supabase import Client, create_client

from helpers.logging_helper import get_logger

load_dotenv()
logger = get_logger("database")

BOT_EMAIL = os.getenv("BOT_EMAIL")
BOT_PASSWORD = os.getenv("BOT_PASSWORD")

LEVELS_TABLE = "levels"
CARD_TABLE = "custom_card"
QUERY_TIMEOUT = 35.0

T = TypeVar("T")

_client: Optional[Client] = None
_QUERY_SLOTS = asyncio.Semaphore(8)

# connection-level failures worth another attempt
_TRANSIENT = (
    httpx.ReadError,
    httpx.RemoteProtocolError,
    httpx.ConnectError,
    httpx.TimeoutException,
    httpcore.ReadError,
    httpcore.TimeoutException,
)
_SERVER_FAILURE_MARKERS = ("internal server error", "json could not be generated")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    attempts: int = 4
    first_delay: float = 0.35
    factor: float = 2.0
    max_delay: float = 5.0
    jitter: float = 0.25

    def delay(self, attempt: int) -> float:
        """Sleep before retry number `attempt` (1-based)."""
        base = min(self.first_delay * self.factor ** (attempt - 1), self.max_delay)
        return base + random.uniform(0.0, self.jitter)


DEFAULT_RETRY = RetryPolicy()


def get_client() -> Client:
    """The shared Supabase client, created on first use."""
    global _client  # pylint: disable=global-statement
    if _client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_ANON_KEY")
        if not url or not key:
            raise ValueError("Supabase URL and Key must be set in the .env file.")
        _client = create_client(url, key)
    return _client


def _access_token(session: Any) -> Optional[str]:
    # supabase-py hands back a model, a wrapper around one, or a plain dict
    for holder in (session, getattr(session, "session", None)):
        token = getattr(holder, "access_token", None)
        if token:
            return token
    if isinstance(session, dict):
        return session.get("access_token") or (session.get("session") or {}).get(
            "access_token"
        )
    return None


def _ensure_session() -> None:
    """Sign the bot user in when configured; anon-key reads need nothing."""
    if not BOT_EMAIL:
        return
    auth = get_client().auth
    if _access_token(auth.get_session()):
        return
    auth.sign_in_with_password({"email": BOT_EMAIL, "password": BOT_PASSWORD})
    if not _access_token(auth.get_session()):
        raise RuntimeError("Supabase user session missing after login")


def _is_server_failure(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _SERVER_FAILURE_MARKERS)


def _retry_sync(call: Callable[[], T], policy: RetryPolicy = DEFAULT_RETRY) -> T:
    """
    Run a blocking query, retrying transport errors with jittered backoff.
    PostgREST failures that surface through the transport are raised at once.
    """
    for attempt in range(1, policy.attempts + 1):
        try:
            return call()
        except _TRANSIENT as exc:
            if _is_server_failure(exc):
                logger.error("Query failed server-side, not retrying: %s", exc)
                raise
            if attempt == policy.attempts:
                logger.error("Query failed after %d attempts: %s", attempt, exc)
                raise
            wait = policy.delay(attempt)
            logger.warning(
                "Query attempt %d/%d failed (%s); retrying in %.2fs",
                attempt,
                policy.attempts,
                exc,
                wait,
            )
            time.sleep(wait)
    raise RuntimeError("retry policy allows no attempts")


async def _read(call: Callable[[], T]) -> T:
    def _run():
        _ensure_session()
        return _retry_sync(call)

    async with _QUERY_SLOTS:
        try:
            return await asyncio.wait_for(asyncio.to_thread(_run), timeout=QUERY_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error("Query timed out after %.0fs", QUERY_TIMEOUT, exc_info=True)
            raise


async def authenticate_bot() -> bool:
    """Sign in at startup so the first /rank doesn't pay for it."""

    def _exec():
        try:
            _ensure_session()
            return True
        except Exception as e:  # pylint: disable=broad-except
            logger.error("Supabase auth failed: %s", e)
            return False

    return await asyncio.to_thread(_exec)


#
# --- Levels ---
#
async def get_user_xp(user_id: int, guild_id: int) -> int:
    """Current XP for a member; 0 when they have no row yet."""

    def _exec():
        return (
            get_client()
            .table(LEVELS_TABLE)
            .select("xp")
            .eq("user_id", user_id)
            .eq("guild_id", guild_id)
            .limit(1)
            .execute()
        )

    response = await _read(_exec)
    if response.data:
        return int(response.data[0]["xp"] or 0)
    return 0


async def get_rank(xp: int, guild_id: int) -> int:
    """1 + the number of members in the guild with strictly more XP."""

    def _exec():
        return (
            get_client()
            .table(LEVELS_TABLE)
            .select("user_id", count="exact")
            .eq("guild_id", guild_id)
            .gt("xp", xp)
            .limit(1)
            .execute()
        )

    response = await _read(_exec)
    return int(response.count or 0) + 1


#
# --- Card customization ---
#
async def get_card_settings(user_id: int) -> Optional[dict]:
    """A user's stored card row (colors, font, toy_image), or None."""

    def _exec():
        return (
            get_client()
            .table(CARD_TABLE)
            .select("*")
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )

    response = await _read(_exec)
    return response.data[0] if response.data else None
