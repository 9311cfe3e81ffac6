"""
Logging setup for the animation.

The terminal belongs to the animation while it runs, so records go to a
log file and never to stdout/stderr.
"""

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

LOG_FILENAME = 'digital_rain.log'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _log_locations() -> List[Path]:
    return [
        Path.home() / '.digital-rain' / 'logs' / LOG_FILENAME,
        Path(tempfile.gettempdir()) / 'digital-rain' / LOG_FILENAME,
    ]


def configure_logging(level: int = logging.INFO,
                      locations: Optional[List[Path]] = None) -> Optional[Path]:
    """
    Attach a file handler to the package logger.

    Tries each location in turn and returns the path that was opened, or
    None if no location was writable (logging then stays silent). Calling
    it again keeps the file already attached.
    """
    package_logger = logging.getLogger('digital_rain')
    package_logger.setLevel(level)

    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    for path in locations or _log_locations():
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, encoding='utf-8')
        except OSError:
            continue
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
        package_logger.propagate = False
        return path

    return None
