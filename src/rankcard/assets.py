# rankcard/assets.py
import functools
import types
from dataclasses import dataclass
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Mapping, Optional

from PIL import Image, ImageFont

import config
from helpers.logging_helper import get_logger

log = get_logger("rankcard.assets")


class Font(Enum):
    LATO = "Lato"
    LATO_LIGHT = "Lato Light"
    SOURCE_CODE_PRO = "Source Code Pro"
    SOURCE_CODE_PRO_BOLD = "Source Code Pro Bold"

    @property
    def family(self) -> str:
        return self.value

    @property
    def css_family(self) -> str:
        """The family name fontconfig knows the file by."""
        return "Source Code Pro" if self is Font.SOURCE_CODE_PRO_BOLD else self.value

    @property
    def weight(self) -> str:
        return "bold" if self is Font.SOURCE_CODE_PRO_BOLD else "normal"

    @property
    def filename(self) -> str:
        return _FONT_FILES[self]

    @classmethod
    def default(cls) -> "Font":
        return cls.LATO

    @classmethod
    def parse(cls, value: str) -> "Font":
        """Resolve a stored or user-supplied font name (family or member name)."""
        key = value.strip().casefold()
        for font in cls:
            if key in (font.value.casefold(), font.name.casefold()):
                return font
        raise ValueError(f"Unknown font: {value!r}")


_FONT_FILES = {
    Font.LATO: "Lato-Regular.ttf",
    Font.LATO_LIGHT: "Lato-Light.ttf",
    Font.SOURCE_CODE_PRO: "SourceCodePro-Regular.ttf",
    Font.SOURCE_CODE_PRO_BOLD: "SourceCodePro-Bold.ttf",
}


class Toy(Enum):
    BRICK = "brick"
    BUG = "bug"
    GEM = "gem"
    PACKAGE = "package"
    PLUGIN = "plugin"
    WRENCH = "wrench"
    ZOOM = "zoom"

    @property
    def filename(self) -> str:
        return f"{self.value}.png"

    @classmethod
    def from_filename(cls, filename: str) -> Optional["Toy"]:
        for toy in cls:
            if toy.filename == filename:
                return toy
        return None

    @classmethod
    def parse(cls, value: str) -> "Toy":
        key = value.strip().casefold().removesuffix(".png")
        for toy in cls:
            if key in (toy.value, toy.name.casefold()):
                return toy
        raise ValueError(f"Unknown toy: {value!r}")


@dataclass(frozen=True)
class AssetRegistry:
    """Embedded fonts and sprites, read once and shared by every render."""

    fonts: Mapping[Font, bytes]
    toys: Mapping[Toy, bytes]

    def font_bytes(self, font: Font) -> bytes:
        return self.fonts[font]

    def toy_bytes(self, toy: Toy) -> bytes:
        return self.toys[toy]

    @classmethod
    def load(
        cls, fonts_dir: Path = config.FONTS_DIR, toys_dir: Path = config.TOYS_DIR
    ) -> "AssetRegistry":
        fonts = {font: _read_font(fonts_dir / font.filename) for font in Font}
        toys = {toy: _read_sprite(toys_dir / toy.filename) for toy in Toy}
        log.info("Loaded %d fonts and %d toy sprites.", len(fonts), len(toys))
        return cls(
            fonts=types.MappingProxyType(fonts), toys=types.MappingProxyType(toys)
        )

    @classmethod
    @functools.cache
    def default(cls) -> "AssetRegistry":
        return cls.load()


def _read_font(path: Path) -> bytes:
    if not path.exists():
        raise FileNotFoundError(f"Could not find the font file at {path}")
    data = path.read_bytes()
    # fail at startup, not on the first render that picks this font
    ImageFont.truetype(BytesIO(data), 12)
    return data


def _read_sprite(path: Path) -> bytes:
    if not path.exists():
        raise FileNotFoundError(f"Could not find the toy sprite at {path}")
    data = path.read_bytes()
    with Image.open(BytesIO(data)) as img:
        img.verify()
    return data
