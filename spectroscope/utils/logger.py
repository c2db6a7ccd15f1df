# spectroscope/utils/logger.py - Logging setup
"""
Logging for the comparison commands.

Diagnostics go to stderr so that stdout only carries the comparison summary
(or the canonicalized graphs). Level names are colored when stderr is a
terminal; the optional log file always gets plain text.
"""

import logging
import sys
from typing import Optional
from colorama import Fore, Style

from spectroscope.utils.helpers import ensure_parent_dir


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

PACKAGE_LOGGER = 'spectroscope'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name of each console record.
    """

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Style.BRIGHT,
    }

    def format(self, record):
        # Color a copy so the file handler still sees the plain level name
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{Style.RESET_ALL}"

        return super().format(record)


def setup_logging(level: str = 'INFO', log_file: Optional[str] = None,
                  use_colors: Optional[bool] = None):
    """
    Route log records to stderr and, optionally, a file.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
        log_file: Optional log file path; its directory is created if needed
        use_colors: Color level names; defaults to whether stderr is a terminal
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers = []

    if use_colors is None:
        use_colors = sys.stderr.isatty()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    formatter_class = ColoredFormatter if use_colors else logging.Formatter
    console_handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(ensure_parent_dir(log_file))
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    logging.getLogger(PACKAGE_LOGGER).debug(f"Logging to stderr at {level}"
                                            + (f" and to {log_file}" if log_file else ""))


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger below the spectroscope namespace.

    Names from outside the package (e.g. '__main__' when cli.py is run as a
    script) are prefixed so that they share the package's configuration.
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + '.'):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
