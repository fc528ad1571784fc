"""Logging setup for the ledger CLI and server."""

import logging
import sys
from datetime import datetime
from pathlib import Path


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_dir: Path = Path('logs'),
) -> logging.Logger:
    """
    Attach console and (optionally) file handlers to the `pokerledger` logger.

    Module loggers such as `pokerledger.games` and `pokerledger.server`
    propagate here. Calling it again replaces the previous handlers.

    Args:
        level: Logging level for the logger and its handlers
        log_to_file: Also write a timestamped pokerledger_*.log file
        log_dir: Directory for the log file

    Returns:
        The `pokerledger` logger
    """
    logger = logging.getLogger('pokerledger')
    logger.setLevel(level)
    logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    logger.addHandler(console_handler)

    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / f'pokerledger_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
        ))
        logger.addHandler(file_handler)

    return logger
