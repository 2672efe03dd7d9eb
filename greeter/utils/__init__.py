from .colored_logging import ColoredFormatter, setup_colored_logging

__all__ = [
    "ColoredFormatter",
    "setup_colored_logging",
]
