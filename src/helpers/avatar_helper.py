# src/helpers/avatar_helper.py
import asyncio
import time
from typing import Optional

import aiohttp
import discord

import config
from helpers.logging_helper import get_logger
from utility.image_utils import to_data_uri

log = get_logger("avatar")

_avatar_cache: dict[str, tuple[float, bytes]] = {}
_FETCH_TIMEOUT = aiohttp.ClientTimeout(total=10)


def avatar_url(user: discord.abc.User, size: int = config.AVATAR_SIZE) -> str:
    """PNG rendition of the user's avatar (their default avatar when they have none)."""
    return str(user.display_avatar.replace(format="png", size=size).url)


async def fetch_avatar_bytes(url: str) -> Optional[bytes]:
    now = time.time()
    cached = _avatar_cache.get(url)
    if cached and now - cached[0] < config.AVATAR_CACHE_TTL:
        return cached[1]

    async with aiohttp.ClientSession(timeout=_FETCH_TIMEOUT) as session:
        async with session.get(url) as resp:
            if resp.status == 200:
                data = await resp.read()
                _avatar_cache[url] = (now, data)
                return data

    log.warning("Avatar fetch failed (%s): %s", resp.status, url)
    return None


async def avatar_data_uri(user: discord.abc.User) -> str:
    """The avatar inlined as a data: URI, or '' so the card is drawn without one."""
    url = avatar_url(user)
    try:
        data = await fetch_avatar_bytes(url)
    except (aiohttp.ClientError, asyncio.TimeoutError):
        log.warning("Avatar fetch errored for %s", url, exc_info=True)
        return ""
    return to_data_uri(data, config.AVATAR_MIME) if data else ""
