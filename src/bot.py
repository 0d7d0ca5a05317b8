# bot.py

import asyncio
import sys
import discord
from discord.ext import commands
from discord import app_commands

import config

from data.database import authenticate_bot
from helpers.logging_helper import get_logger, setup_logging
from rankcard.errors import PoolInitError
from rankcard.renderer import CardRenderer
from utility.logging_utils import LogSettings

# --- Set up basic logging ---
setup_logging(
    LogSettings.from_env(),
    http_log_path=config.HTTP_LOG_FILE,
    http_level="INFO",
    http_propagate=False,
)
log = get_logger("bootstrap")

EXTENSIONS = ("cogs.rank",)

# /rank only reads members from interactions; no privileged intents needed
intents = discord.Intents.default()

bot = commands.Bot(command_prefix="!", intents=intents)


@bot.tree.error
async def on_app_command_error(
    interaction: discord.Interaction, error: app_commands.AppCommandError
):
    """A global error handler for all slash commands."""

    if isinstance(error, app_commands.NoPrivateMessage):
        await interaction.response.send_message(
            "This command only works inside a server.", ephemeral=True
        )
    elif isinstance(error, app_commands.CommandOnCooldown):
        await interaction.response.send_message(
            f"⏳ This command is on cooldown. Please try again in {error.retry_after:.2f} seconds.",
            ephemeral=True,
        )
    else:
        # Generic fallback for other errors
        log.error("Unhandled command error: %s", error)
        if interaction.response.is_done():
            await interaction.followup.send(
                "An unexpected error occurred. Please try again later.", ephemeral=True
            )
        else:
            await interaction.response.send_message(
                "An unexpected error occurred. Please try again later.", ephemeral=True
            )


coglog = get_logger("cogs")


@bot.event
async def on_ready():
    """Event that runs when the bot is connected and ready."""
    log.info("Logged in as %s (ID: %s)", bot.user, bot.user.id)
    log.info("Bot is ready and online!")
    log.info("%s", "-" * 20)
    ok = await authenticate_bot()
    if ok:
        log.info("✅ Bot authenticated with Supabase")
    else:
        log.error("❌ Bot failed to authenticate with Supabase")


async def load_cogs():
    """Loads the bot's extensions; a broken one is logged and skipped."""
    for ext in EXTENSIONS:
        try:
            await bot.load_extension(ext)
            coglog.info("Loaded cog: %s", ext)
        except Exception:
            coglog.exception("Failed to load cog %s", ext)


async def main():
    """Start the render pool, load cogs and run the bot."""
    try:
        renderer = CardRenderer(workers=config.RENDER_WORKERS)
    except PoolInitError:
        log.critical("Could not start the card render pool", exc_info=True)
        sys.exit(1)

    bot.card_renderer = renderer
    try:
        async with bot:
            await load_cogs()
            await bot.start(config.TOKEN)
    finally:
        renderer.close(wait=False)


if __name__ == "__main__":
    asyncio.run(main())
