from io import BytesIO
from typing import Optional

#
import discord
from discord.ext import commands
from discord import app_commands

#
import config
from data import database
from helpers.avatar_helper import avatar_data_uri
from helpers.card_helper import describe_customization, resolve_customization
from helpers.logging_helper import get_logger
from rankcard.context import RenderContext
from rankcard.errors import RenderError
from rankcard.renderer import CardRenderer
from utility.level_utils import LevelInfo, build_level_info

log = get_logger("rank")

BOTS_UNRANKED = "Bots aren't ranked, that would be silly!"
SELF_UNRANKED = "You aren't ranked yet, because you haven't sent any messages!"
LOOKUP_FAILED = "Could not look up that rank. Please try again later."


def unranked_message(target: discord.abc.User, invoker: discord.abc.User) -> str:
    if target.id == invoker.id:
        return SELF_UNRANKED
    return f"{target.display_name} isn't ranked yet, because they haven't sent any messages!"


def level_summary(name: str, info: LevelInfo, rank: int) -> str:
    return (
        f"{name} is level {info.level} (rank #{rank}), "
        f"and is {info.percentage}% of the way to level {info.level + 1}."
    )


class Rank(commands.Cog, name="Rank"):
    def __init__(self, bot: commands.Bot, renderer: CardRenderer):
        self.bot = bot
        self.renderer = renderer
        self.view_rank_menu = app_commands.ContextMenu(
            name="View rank", callback=self.view_rank
        )
        self.view_rank_menu.guild_only = True
        self.bot.tree.add_command(self.view_rank_menu)

    async def cog_unload(self):
        self.bot.tree.remove_command(
            self.view_rank_menu.name, type=self.view_rank_menu.type
        )

    @app_commands.command(
        name="rank", description="Check your (or someone else's) level & rank card"
    )
    @app_commands.describe(member="The member to check")
    @app_commands.guild_only()
    async def rank(
        self, interaction: discord.Interaction, member: Optional[discord.Member] = None
    ):
        await self.respond_with_level(interaction, member or interaction.user)

    async def view_rank(self, interaction: discord.Interaction, member: discord.Member):
        await self.respond_with_level(interaction, member)

    async def respond_with_level(
        self, interaction: discord.Interaction, target: discord.abc.User
    ) -> None:
        await interaction.response.defer()
        try:
            if target.bot:
                await interaction.followup.send(BOTS_UNRANKED, ephemeral=True)
                return

            guild_id = interaction.guild.id
            xp = await database.get_user_xp(target.id, guild_id)
            if xp == 0:
                await interaction.followup.send(
                    unranked_message(target, interaction.user), ephemeral=True
                )
                return

            rank = await database.get_rank(xp, guild_id)
            card = await self.build_card(target, build_level_info(xp), rank)
            await interaction.followup.send(
                file=card, allowed_mentions=discord.AllowedMentions.none()
            )
        except RenderError:
            log.exception("Rank card render failed for %s", target.id)
            await interaction.followup.send(config.RENDER_FAILED_MESSAGE, ephemeral=True)
        except Exception:
            log.exception("Error in /rank command")
            await interaction.followup.send(LOOKUP_FAILED, ephemeral=True)

    async def build_card(
        self, target: discord.abc.User, info: LevelInfo, rank: int
    ) -> discord.File:
        colors, font, toy = resolve_customization(
            await database.get_card_settings(target.id)
        )
        context = RenderContext.from_level_info(
            info,
            rank=rank,
            name=target.display_name,
            discriminator=target.discriminator,
            avatar=await avatar_data_uri(target),
            colors=colors,
            font=font,
            toy=toy,
        )
        png = await self.renderer.render(context)
        return discord.File(
            fp=BytesIO(png),
            filename=config.CARD_FILENAME,
            description=level_summary(target.display_name, info, rank),
        )

    @app_commands.command(
        name="card-show", description="Show the colors, font and toy of a rank card"
    )
    @app_commands.describe(member="Whose card settings to show (defaults to you)")
    async def card_show(
        self, interaction: discord.Interaction, member: Optional[discord.Member] = None
    ):
        await interaction.response.defer(ephemeral=True)
        target = member or interaction.user
        try:
            record = await database.get_card_settings(target.id)
            text = describe_customization(*resolve_customization(record))
            embed = discord.Embed(
                title=f"{target.display_name}'s card",
                description=text,
                color=config.THEME_COLOR,
            )
            await interaction.followup.send(embed=embed, ephemeral=True)
        except Exception:
            log.exception("Error in /card-show command")
            await interaction.followup.send(
                "Could not load card settings. Please try again later.", ephemeral=True
            )


async def setup(bot: commands.Bot):
    await bot.add_cog(Rank(bot, bot.card_renderer))
