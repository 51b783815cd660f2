"""
Logger setup for How Much Ah?
"""

import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logger(log_level: str = 'WARNING', log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Setup logging configuration

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for the log file; console only when omitted

    Returns:
        Configured logger instance
    """
    log_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / 'howmuch.log'))

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format=log_format,
        handlers=handlers,
        force=True,
    )

    return logging.getLogger('howmuch')
