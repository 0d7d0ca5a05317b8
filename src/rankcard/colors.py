# rankcard/colors.py
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional

HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class InvalidColorError(ValueError):
    pass


def normalize_hex(value: str) -> str:
    """'#1e90ff' / '1E90FF' -> '1E90FF'. Anything but six hex digits is rejected."""
    if not isinstance(value, str):
        raise InvalidColorError(f"Color must be a string, got {type(value).__name__}")
    raw = value.strip().removeprefix("#")
    if len(raw) != 6:
        raise InvalidColorError(
            "Invalid length! Color hex data length must be exactly 6 characters!"
        )
    if not all(c in HEX_DIGITS for c in raw):
        raise InvalidColorError(f"Invalid hex color: {value!r}")
    return raw.upper()


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class Colors:
    important: str = "FFFFFF"
    secondary: str = "CCCCCC"
    rank: str = "FFFFFF"
    level: str = "33BBFF"
    border: str = "1E2229"
    background: str = "2C313A"
    progress_foreground: str = "33BBFF"
    progress_background: str = "1E2229"

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, normalize_hex(getattr(self, f.name)))

    @classmethod
    def from_record(cls, record: Optional[Mapping[str, Any]]) -> "Colors":
        """Build from a stored row; absent or NULL columns keep the default."""
        if not record:
            return cls()
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in record.items() if k in names and v is not None})

    def as_css(self) -> dict[str, str]:
        return {f.name: f"#{getattr(self, f.name)}" for f in fields(self)}

    def __str__(self) -> str:
        default = Colors()
        lines = []
        for f in fields(self):
            value = getattr(self, f.name)
            label = f.name.replace("_", " ").capitalize()
            suffix = " (default)" if value == getattr(default, f.name) else ""
            lines.append(f"{label} color: `#{value}`{suffix}")
        return "\n".join(lines) + "\n"
