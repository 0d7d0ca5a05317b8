# rankcard/context.py
from dataclasses import dataclass, field
from typing import Any, Optional

from rankcard.assets import Font, Toy
from rankcard.colors import Colors
from utility.level_utils import LevelInfo, progress_bar_pixels


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class RenderContext:
    """Everything one card needs. Built per request, rendered once."""

    level: int
    rank: int
    name: str
    discriminator: str
    percentage: int  # right edge of the progress bar, in pixels
    current: int
    needed: int
    font: Font = Font.LATO
    colors: Colors = field(default_factory=Colors)
    toy: Optional[Toy] = None
    avatar: str = ""  # data: URI

    # pylint: disable=too-many-arguments
    @classmethod
    def from_level_info(
        cls,
        info: LevelInfo,
        *,
        rank: int,
        name: str,
        discriminator: str = "0",
        avatar: str = "",
        colors: Optional[Colors] = None,
        font: Optional[Font] = None,
        toy: Optional[Toy] = None,
    ) -> "RenderContext":
        return cls(
            level=info.level,
            rank=rank,
            name=name,
            discriminator=discriminator,
            percentage=progress_bar_pixels(info.progress),
            current=info.xp,
            needed=info.next_level_xp,
            font=font or Font.default(),
            colors=colors or Colors(),
            toy=toy,
            avatar=avatar,
        )

    def template_vars(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "rank": self.rank,
            "name": self.name,
            "discriminator": self.discriminator,
            "percentage": self.percentage,
            "current": self.current,
            "needed": self.needed,
            "font": self.font.css_family,
            "font_weight": self.font.weight,
            "colors": self.colors.as_css(),
            "toy": self.toy.filename if self.toy else None,
            "avatar": self.avatar,
        }
