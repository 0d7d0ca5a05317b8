from dataclasses import asdict, dataclass
from typing import Optional
import os
import config


# pylint:disable=too-many-instance-attributes
@dataclass(frozen=True, slots=True)
class LogSettings:
    # root/app
    level: Optional[str] = None
    fmt: str = config.DEFAULT_FMT
    datefmt: str = config.DEFAULT_DATEFMT
    file_path: Optional[str] = config.LOG_FILE
    max_bytes: int = 5_000_000
    backup_count: int = 3
    discord_level: str = "WARNING"
    quiet_loggers: tuple[str, ...] = ("asyncio", "PIL")

    # dedicated HTTP log (avatar fetches, supabase)
    http_log_path: Optional[str] = None
    http_level: str = "INFO"
    http_propagate: bool = False
    http_logger_names: tuple[str, ...] = ("aiohttp", "httpx", "httpcore")

    @property
    def level_norm(self) -> str:
        return (self.level or os.getenv("LOG_LEVEL", "INFO")).upper()

    @classmethod
    def from_env(cls) -> "LogSettings":
        return cls(
            level=os.getenv("LOG_LEVEL"),
            file_path=os.getenv("LOG_FILE", config.LOG_FILE) or None,
            http_log_path=os.getenv("HTTP_LOG_FILE") or None,
        )

    @classmethod
    def build(cls, base: "LogSettings | None" = None, **overrides) -> "LogSettings":
        """
        Merge an optional base dataclass with kwargs (overrides win), coerce types.
        """
        data = asdict(base) if base else {}
        data.update({k: v for k, v in overrides.items() if v is not None})
        for key in ("http_logger_names", "quiet_loggers"):
            if key in data and not isinstance(data[key], tuple):
                data[key] = tuple(data[key])  # type: ignore[arg-type]
        return cls(**data)
