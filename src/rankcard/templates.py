# rankcard/templates.py
import functools
from numbers import Real
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

import config

_MAGNITUDES = (
    (1_000_000_000, "b"),
    (1_000_000, "m"),
    (1_000, "k"),
)


def integer_humanize(value: Any) -> Any:
    """
    12345 -> '12.34k'. Truncates to two decimals so a value never reads as the
    next magnitude up. Non-numbers are passed through untouched.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return value
    num = int(value)
    for magnitude, suffix in _MAGNITUDES:
        if num >= magnitude:
            whole, hundredths = divmod(num * 100 // magnitude, 100)
            if hundredths:
                return f"{whole}.{hundredths:02d}".rstrip("0") + suffix
            return f"{whole}{suffix}"
    return str(num) if num == value else str(value)


class CardTemplates:
    """The compiled card template. Built once, rendered from any thread."""

    def __init__(
        self,
        resources_dir: Path = config.RESOURCES_DIR,
        name: str = config.CARD_TEMPLATE_NAME,
    ):
        self.env = Environment(
            loader=FileSystemLoader(str(resources_dir)),
            autoescape=select_autoescape(
                enabled_extensions=("svg", "xml", "html", "htm", "j2"),
                default_for_string=True,
            ),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["integerhumanize"] = integer_humanize
        # compile now so a broken template stops startup
        self.card = self.env.get_template(name)

    def render_card(self, variables: dict[str, Any]) -> str:
        return self.card.render(variables)

    @classmethod
    @functools.cache
    def default(cls) -> "CardTemplates":
        return cls()
