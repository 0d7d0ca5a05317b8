# tests/conftest.py
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest
from PIL import Image

from rankcard.context import RenderContext
from rankcard.renderer import CardRenderer
from utility.image_utils import encode_png, to_data_uri
from utility.level_utils import build_level_info

AVATAR_RGBA = (200, 40, 40, 255)


@pytest.fixture
def avatar_rgba():
    return AVATAR_RGBA


@pytest.fixture(scope="session")
def renderer():
    r = CardRenderer(workers=2)
    yield r
    r.close()


@pytest.fixture
def avatar_uri():
    img = Image.new("RGBA", (64, 64), AVATAR_RGBA)
    return to_data_uri(encode_png(img), "image/png")


@pytest.fixture
def sample_context(avatar_uri):
    return RenderContext.from_level_info(
        build_level_info(3255),
        rank=4,
        name="Ghost",
        discriminator="0",
        avatar=avatar_uri,
    )


@pytest.fixture
def interaction():
    it = MagicMock(spec=discord.Interaction)
    it.guild = MagicMock(spec=discord.Guild)
    it.guild.id = 123
    it.user = MagicMock(spec=discord.Member)
    it.user.id = 7
    it.user.bot = False
    it.user.display_name = "Invoker"
    it.user.discriminator = "0"

    it.response = MagicMock()
    it.response.send_message = AsyncMock()
    it.response.defer = AsyncMock()

    it.followup = MagicMock()
    it.followup.send = AsyncMock()
    return it
