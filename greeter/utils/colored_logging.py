"""
Colored logging for console output.

Logs always go to stderr: in stdio mode stdout carries the protocol stream.
"""

import logging
import sys
from typing import Optional, TextIO, Union


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[41m",  # Red background
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        color = self.COLORS.get(record.levelname, "")
        if color:
            colored_level = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
            message = message.replace(record.levelname, colored_level, 1)

        return message


def setup_colored_logging(
    level: Union[int, str] = logging.INFO,
    stream: Optional[TextIO] = None,
    use_color: Optional[bool] = None,
) -> None:
    """
    Configure the root logger with a single stderr handler.

    Args:
        level: Logging level, as a number or a name such as "DEBUG"
        stream: Output stream (default: sys.stderr)
        use_color: Force colors on or off; by default only when the stream is a TTY
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    stream = stream or sys.stderr
    if use_color is None:
        use_color = hasattr(stream, "isatty") and stream.isatty()

    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter(fmt) if use_color else logging.Formatter(fmt))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
