# helpers/logging_helper.py
import logging
import time
import sys
from pathlib import Path
from typing import Optional
from logging.handlers import RotatingFileHandler

from utility.logging_utils import LogSettings


class EveryNSecondsFilter(logging.Filter):
    def __init__(self, seconds: int):
        super().__init__()
        self.seconds = seconds
        self._last = 0.0

    def filter(self, record: logging.LogRecord) -> bool:
        now = time.monotonic()
        if now - self._last >= self.seconds:
            self._last = now
            return True
        return False


def _apply_core_levels(cfg: LogSettings) -> logging.Logger:
    root = logging.getLogger()
    root.setLevel(cfg.level_norm)
    logging.getLogger("discord").setLevel(cfg.discord_level)
    for name in cfg.quiet_loggers:
        logging.getLogger(name).setLevel("WARNING")
    return root


def _attach_root_handlers(root: logging.Logger, cfg: LogSettings) -> None:
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(cfg.fmt, cfg.datefmt)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(fmt)
    root.addHandler(sh)

    if cfg.file_path:
        try:
            root.addHandler(_rotating_handler(cfg.file_path, cfg))
        except OSError:
            root.exception(
                "Failed to attach file handler; continuing with console only."
            )


def _rotating_handler(path: str, cfg: LogSettings) -> RotatingFileHandler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        path,
        maxBytes=cfg.max_bytes,
        backupCount=cfg.backup_count,
        encoding="utf-8",
    )
    fh.setFormatter(logging.Formatter(cfg.fmt, cfg.datefmt))
    return fh


def _route_http_loggers(
    current: Optional[RotatingFileHandler], cfg: LogSettings
) -> Optional[RotatingFileHandler]:
    """Point the HTTP client loggers at their own file, or keep them quiet. Returns the live handler."""
    want_path = str(Path(cfg.http_log_path)) if cfg.http_log_path else None
    keep = current is not None and getattr(current, "baseFilename", "") == want_path

    if current and not keep:
        for nm in cfg.http_logger_names:
            logging.getLogger(nm).removeHandler(current)
        current.close()
        current = None

    for nm in cfg.http_logger_names:
        log = logging.getLogger(nm)
        log.setLevel(cfg.http_level if want_path else "WARNING")
        log.propagate = cfg.http_propagate if want_path else False

    if not want_path or keep:
        return current

    try:
        http_fh = _rotating_handler(want_path, cfg)
    except OSError:
        logging.getLogger().exception(
            "Failed to attach HTTP log handler; continuing without dedicated HTTP log."
        )
        return None
    for nm in cfg.http_logger_names:
        logging.getLogger(nm).addHandler(http_fh)
    return http_fh


def setup_logging(cfg: LogSettings | None = None, **overrides) -> None:
    """
    Configure root logging once. Safe to call multiple times:
    - First call: attach handlers
    - Later calls: just update levels / HTTP routing
    """
    cfg = LogSettings.build(cfg, **overrides)
    root = _apply_core_levels(cfg)

    if not getattr(setup_logging, "configured", False):
        _attach_root_handlers(root, cfg)
        logging.captureWarnings(True)
        setup_logging.configured = True

    prev = getattr(setup_logging, "http_handler", None)
    setup_logging.http_handler = _route_http_loggers(prev, cfg)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"bot.{name}")


def add_throttle(logger: logging.Logger, seconds: int) -> None:
    logger.addFilter(EveryNSecondsFilter(seconds))
