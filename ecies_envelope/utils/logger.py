"""
Centralized logger for the ECIES package.

One configured root logger ("ECIES") owns the handlers; every stage logs
through a child ("ECIES.envelope", "ECIES.cipher", "ECIES.mac") that
propagates to it, so a single set_level() call controls the whole package.

Key material is never passed to these loggers; only sizes, suite names
and stage names are.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from ..config import ECIES_CONSTANTS

_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


class EciesLogger:
    """
    Logger factory for ECIES operations with console and file output.
    """

    _loggers = {}

    @staticmethod
    def get_logger(
        name: str = ECIES_CONSTANTS.LOGGER_NAME,
        log_dir: Optional[str] = None,
        level: Union[int, str] = logging.WARNING,
        console_output: bool = True,
    ) -> logging.Logger:
        """
        Get or create a configured logger.

        Args:
            name: Logger name (e.g. "ECIES")
            log_dir: Directory for `<name>.log` (optional)
            level: Minimum log level, as int or name ("DEBUG")
            console_output: If True, also log to stderr

        Returns:
            Configured logger; the same object on later calls with `name`
        """
        if name in EciesLogger._loggers:
            return EciesLogger._loggers[name]

        level = _resolve_level(level)
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False
        logger.handlers.clear()

        # [2025-10-09 14:30:45] [ECIES.mac] [WARNING] Message
        formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

        handlers = []
        if console_output:
            handlers.append(logging.StreamHandler(sys.stderr))
        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path / f"{name}.log", encoding="utf-8"))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        EciesLogger._loggers[name] = logger
        return logger

    @staticmethod
    def get_stage_logger(stage: str) -> logging.Logger:
        """
        Child logger for one pipeline stage.

        Has no handlers of its own; records propagate to the package logger.
        """
        EciesLogger.get_logger(ECIES_CONSTANTS.LOGGER_NAME)
        return logging.getLogger(f"{ECIES_CONSTANTS.LOGGER_NAME}.{stage}")

    @staticmethod
    def set_level(name: str, level: Union[int, str]):
        """Change the level of a configured logger and its handlers."""
        if name in EciesLogger._loggers:
            level = _resolve_level(level)
            logger = EciesLogger._loggers[name]
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)

    @staticmethod
    def clear_cache():
        EciesLogger._loggers.clear()
