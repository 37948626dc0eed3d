from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union

APP_LOGGER_PREFIX = "hr_portal"

# Marks handlers installed here so a second call replaces only those.
_HANDLER_MARK = "_hr_portal_handler"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Keep the console readable:
    - allow application logs
    - realtime transport chatter only at WARNING+
    - third-party libraries (werkzeug, urllib3, websocket) only at ERROR+
    """

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if APP_LOGGER_PREFIX in name.split("."):
            if name.endswith("gateway.realtime"):
                return record.levelno >= logging.WARNING
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Union[str, Path]] = None,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure the root logger with:
    - Console handler: filtered for interactive use
    - File handler (when ``log_dir`` is set): full logs for debugging

    Call once, from the app factory.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    for h in list(root.handlers):
        if getattr(h, _HANDLER_MARK, False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    setattr(ch, _HANDLER_MARK, True)
    root.addHandler(ch)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "hr_portal.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        setattr(fh, _HANDLER_MARK, True)
        root.addHandler(fh)

    logging.captureWarnings(True)
