# tests/test_level_utils.py
import pytest

from utility.level_utils import (
    MAX_XP,
    LevelInfo,
    build_level_info,
    level_from_xp,
    nice_round,
    progress_bar_pixels,
    xp_for_level,
)


@pytest.mark.parametrize(
    "level, xp",
    [
        (0, 0),
        (1, 7),
        (2, 15),
        (3, 37),
        (4, 81),
        (5, 160),
        (6, 270),
        (7, 440),
        (8, 660),
        (9, 950),
        (10, 1310),
        (11, 1760),
        (12, 2310),
        (13, 2960),
        (14, 3730),
        (15, 4620),
        (20, 11300),
        (30, 40000),
        (31, 80000),
        (32, 120000),
    ],
)
def test_xp_for_level_known_thresholds(level, xp):
    assert xp_for_level(level) == xp


def test_thresholds_strictly_increase():
    prev = xp_for_level(0)
    for level in range(1, 200):
        cur = xp_for_level(level)
        assert cur > prev, level
        prev = cur


def test_past_the_cap_each_level_costs_the_same():
    wall = xp_for_level(30)
    for level in range(30, 80):
        assert xp_for_level(level + 1) - xp_for_level(level) == wall


def test_nice_round_rounds_half_away_from_zero():
    # 6 + 2**3.1155 ~ 14.67, multiple 1
    assert nice_round(14.5) == 15
    # 4 digits -> multiple of 10
    assert nice_round(1311.0) == 1310
    assert nice_round(1315.0) == 1320


@pytest.mark.parametrize(
    "xp, level",
    [
        (0, 0),
        (6, 0),
        (7, 1),
        (14, 1),
        (15, 2),
        (2959, 12),
        (2960, 13),
        (3255, 13),
        (39999, 29),
        (40000, 30),
        (79999, 30),
        (80000, 31),
        (100000, 31),
        (10_000_000, 279),
    ],
)
def test_level_from_xp(xp, level):
    assert level_from_xp(xp) == level


def test_level_boundaries_round_trip():
    for level in range(1, 120):
        threshold = xp_for_level(level)
        assert level_from_xp(threshold) == level
        assert level_from_xp(threshold - 1) == level - 1


def test_max_xp_is_accepted():
    info = build_level_info(MAX_XP)
    assert info.level == 29 + MAX_XP // 40000
    assert 0.0 <= info.progress < 1.0
    assert info.next_level_xp == MAX_XP
    assert info.xp_to_next == 0


def test_next_level_xp_uncapped_below_the_top():
    info = build_level_info(MAX_XP - 40000)
    assert info.next_level_xp < MAX_XP
    assert info.next_level_xp % 40000 == 0


@pytest.mark.parametrize("xp", [-1, MAX_XP + 1])
def test_out_of_range_xp_rejected(xp):
    with pytest.raises(ValueError):
        level_from_xp(xp)


@pytest.mark.parametrize("xp", [True, 1.5, "10", None])
def test_non_integer_xp_rejected(xp):
    with pytest.raises(TypeError):
        level_from_xp(xp)


def test_build_level_info_mid_level():
    info = build_level_info(3255)
    assert info.level == 13
    assert info.level_xp == 2960
    assert info.next_level_xp == 3730
    assert info.xp_into_level == 295
    assert info.xp_to_next == 475
    assert info.progress == pytest.approx(295 / 770)
    assert info.percentage == 38


def test_build_level_info_unranked():
    info = build_level_info(0)
    assert info.level == 0
    assert info.level_xp == 0
    assert info.next_level_xp == 7
    assert info.progress == 0.0


def test_build_level_info_capped_regime():
    info = build_level_info(100000)
    assert (info.level, info.level_xp, info.next_level_xp) == (31, 80000, 120000)
    assert info.progress == pytest.approx(0.5)
    assert info.percentage == 50


def test_percentage_rounds_half_up():
    info = LevelInfo(xp=0, level=0, progress=0.125, level_xp=0, next_level_xp=7)
    assert info.percentage == 13


@pytest.mark.parametrize(
    "progress, pixels",
    [(0.0, 40), (0.5, 390), (295 / 770, 308), (0.999, 739)],
)
def test_progress_bar_pixels(progress, pixels):
    assert progress_bar_pixels(progress) == pixels
