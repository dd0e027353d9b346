"""Logging setup shared by the web service and the CLI."""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Third-party loggers that report every request or form part at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "multipart", "python_multipart")


def _resolve_level(level: int | str) -> int:
    """Accept logging constants or level names such as ``LOG_LEVEL=debug``."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    format_string: str | None = None,
) -> None:
    """Configure the root logger once per process.

    Args:
        level: Logging level, as a constant or a name
        log_file: Optional file receiving a copy of every record
        format_string: Overrides LOG_FORMAT
    """
    level = _resolve_level(level)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=format_string or LOG_FORMAT, handlers=handlers, force=True)

    # Keep the wsfunction trail readable unless the noise is explicitly wanted
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> logging.Logger:
    """Module logger; call as ``get_logger(__name__)``."""
    return logging.getLogger(name)
