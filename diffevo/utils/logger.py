"""
Logging setup for diffevo runs.
"""
import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"

_HANDLER_MARK = "_diffevo_handler"


def setup_logging(
    run_dir: Optional[Path] = None,
    log_file: str = "diffevo.log",
    level: int = logging.INFO,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the `diffevo` logger hierarchy.

    Calling it again replaces the handlers it installed earlier, so repeated
    runs in one process do not duplicate output.

    Args:
        run_dir: Directory for the log file (no file logging when None)
        log_file: Log file name inside run_dir
        level: Logging level
        console: Also log to stderr

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger("diffevo")
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            package_logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(DEFAULT_FORMAT)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(formatter)
        setattr(stream_handler, _HANDLER_MARK, True)
        package_logger.addHandler(stream_handler)

    if run_dir is not None:
        run_dir = Path(run_dir)
        run_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(run_dir / log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        setattr(file_handler, _HANDLER_MARK, True)
        package_logger.addHandler(file_handler)

    return package_logger
