import logging
import sys
from typing import Optional


class ColoredFormatter(logging.Formatter):
    """Formatter that colours the timestamp, level and delimiter of a record."""

    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[41m\033[37m",  # White on Red background
        "DATE": "\033[90m",
        "DELIMITER": "\033[36m",
        "RESET": "\033[0m",
    }

    def format(self, record):
        formatted_msg = super().format(record)
        reset = self.COLORS["RESET"]
        level_name = record.levelname

        # "<asctime> - <levelname> - <message>"
        parts = formatted_msg.split(" - ", 2)
        if len(parts) == 3 and level_name in self.COLORS:
            timestamp, _, message = parts
            delimiter = f"{self.COLORS['DELIMITER']} - {reset}"
            return (
                f"{self.COLORS['DATE']}{timestamp}{reset}{delimiter}"
                f"{self.COLORS[level_name]}{level_name:8}{reset} - {message}"
            )

        if level_name in self.COLORS:
            return f"{self.COLORS[level_name]}{formatted_msg}{reset}"
        return formatted_msg


LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(level: str, color: Optional[bool] = None) -> None:
    """Send log records to stderr at ``level``, coloured when stderr is a terminal."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    logger = logging.getLogger()
    logger.setLevel(numeric_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)

    if color is None:
        color = sys.stderr.isatty()
    formatter_class = ColoredFormatter if color else logging.Formatter
    handler.setFormatter(formatter_class(LOG_FORMAT))

    logger.addHandler(handler)
