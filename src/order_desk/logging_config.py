import logging
import os


def setup_logging(level: str = None) -> None:
    """Configure root logging once for the command-line process.

    `level` falls back to the LOG_LEVEL environment variable, then WARNING,
    so log lines stay out of the interactive menus unless asked for.
    """
    level = (level or os.getenv("LOG_LEVEL", "WARNING")).upper()
    numeric_level = getattr(logging, level, logging.WARNING)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(__name__).debug("Logging initialized at level: %s", level)
