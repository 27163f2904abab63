"""
Logging setup - persistent log file plus terminal echo.

Everything from INFO (DEBUG in debug mode) goes to the log file. The
terminal gets warnings and errors, and INFO messages too in verbose mode.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_configured_handlers = []


def setup_logging(
    log_file: Optional[Path],
    debug: bool = False,
    verbose: bool = True,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Configure the 'notetune' logger.

    Args:
        log_file: persistent log, skipped if None or not writable
        debug: log DEBUG messages to the file
        verbose: echo INFO messages to the terminal
        console: rich console for the terminal echo (stderr by default)

    Returns:
        The package logger
    """
    logger = logging.getLogger("notetune")
    for handler in _configured_handlers:
        logger.removeHandler(handler)
        handler.close()
    _configured_handlers.clear()

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False

    terminal = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    terminal.setLevel(logging.INFO if verbose else logging.WARNING)
    logger.addHandler(terminal)
    _configured_handlers.append(terminal)

    if log_file is not None:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            logger.warning("Unable to open log file '%s': %s", log_file, e)
        else:
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
            logger.addHandler(file_handler)
            _configured_handlers.append(file_handler)

    return logger
