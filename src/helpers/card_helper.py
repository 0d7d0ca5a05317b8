# src/helpers/card_helper.py
from typing import Any, Mapping, Optional

from helpers.logging_helper import get_logger
from rankcard.assets import Font, Toy
from rankcard.colors import Colors, InvalidColorError

log = get_logger("card")


def resolve_customization(
    record: Optional[Mapping[str, Any]],
) -> tuple[Colors, Font, Optional[Toy]]:
    """
    Map a stored custom_card row to render inputs. Bad stored values fall back
    to the defaults so a broken row never blocks a card.
    """
    record = record or {}

    try:
        colors = Colors.from_record(record)
    except InvalidColorError:
        log.warning("Stored colors for %s are invalid; using defaults", record.get("user_id"))
        colors = Colors()

    font = Font.default()
    if record.get("font"):
        try:
            font = Font.parse(record["font"])
        except ValueError:
            log.warning("Unknown stored font %r; using %s", record["font"], font.family)

    toy = None
    if record.get("toy_image"):
        try:
            toy = Toy.parse(record["toy_image"])
        except ValueError:
            log.warning("Unknown stored toy %r; drawing none", record["toy_image"])

    return colors, font, toy


def describe_customization(colors: Colors, font: Font, toy: Optional[Toy]) -> str:
    font_line = f"Font: `{font.family}`" + (" (default)\n" if font is Font.default() else "\n")
    toy_line = f"Toy: `{toy.value}`\n" if toy else "Toy: none\n"
    return str(colors) + font_line + toy_line
