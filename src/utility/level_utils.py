# level_utils.py
import math
from dataclasses import dataclass

import config

MAX_XP = 2**64 - 1
CAPPED_FROM_LEVEL = 30  # past this the curve turns into a linear wall


@dataclass(slots=True, frozen=True)
class LevelInfo:
    """Everything derived from a single XP value, computed once up front."""

    xp: int
    level: int
    progress: float
    level_xp: int
    next_level_xp: int

    @property
    def xp_into_level(self) -> int:
        return self.xp - self.level_xp

    @property
    def xp_to_next(self) -> int:
        return self.next_level_xp - self.xp

    @property
    def percentage(self) -> int:
        return int(_round_half_away(self.progress * 100.0))


def _round_half_away(num: float) -> float:
    # same as f64::round; builtin round() would round half to even
    floor = math.floor(num)
    return floor + 1.0 if num - floor >= 0.5 else float(floor)


def nice_round(num: float) -> float:
    multiple = 10.0 ** math.floor(math.log10(num) / 2.0)
    return _round_half_away(num / multiple) * multiple


def xp_for_level(level: int) -> int:
    if level <= 0:
        return 0
    if level > CAPPED_FROM_LEVEL:
        return xp_for_level(CAPPED_FROM_LEVEL) * (level - (CAPPED_FROM_LEVEL - 1))
    base_xp = 6.0 + float(level) ** 3.1155
    return int(nice_round(base_xp))


def _check_xp(xp: int) -> int:
    if isinstance(xp, bool) or not isinstance(xp, int):
        raise TypeError(f"xp must be an int, got {type(xp).__name__}")
    if xp < 0 or xp > MAX_XP:
        raise ValueError(f"xp must be within 0..{MAX_XP}, got {xp}")
    return xp


def level_from_xp(xp: int) -> int:
    xp = _check_xp(xp)
    wall = xp_for_level(CAPPED_FROM_LEVEL)
    if xp >= wall:
        return (CAPPED_FROM_LEVEL - 1) + xp // wall

    lvl = 0
    while xp >= xp_for_level(lvl + 1):
        lvl += 1
    return lvl


def build_level_info(xp: int) -> LevelInfo:
    level = level_from_xp(xp)
    start = xp_for_level(level)
    nxt = xp_for_level(level + 1)
    return LevelInfo(
        xp=xp,
        level=level,
        progress=(xp - start) / (nxt - start),
        level_xp=start,
        # the last level never completes; its threshold is past the XP range
        next_level_xp=min(nxt, MAX_XP),
    )


def progress_bar_pixels(progress: float) -> int:
    """Right edge of the filled progress bar, in card pixels."""
    return int(progress * config.PROGRESS_BAR_WIDTH + config.PROGRESS_BAR_ORIGIN)
