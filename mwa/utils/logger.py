"""
Logging for the auction engine.

Everything logs under the "mwa" namespace: the engine logs bids and
lifecycle changes, the ledger logs escrow movements, the house logs
creation, and the CLI logs script replay. One colored console handler
is installed on first use; a plain-text file handler is added when
log_to_file is set (see EngineSettings).
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

NAMESPACE = "mwa"
LOG_FILE = "mwa.log"

CONSOLE_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"
FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Rejections are WARNING, sink failures are ERROR
LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


class MWALogger:
    """Owns the handlers of the "mwa" logger tree"""

    _initialized = False
    _log_dir: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: int = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
    ):
        """
        Install handlers once per process.

        Later calls are ignored until reset(), so the CLI can reconfigure
        after reading --debug and the environment.

        Args:
            level: Threshold for both handlers
            log_dir: Where mwa.log goes (default ./logs)
            log_to_file: Also append to mwa.log
        """
        if cls._initialized:
            return

        engine_logger = logging.getLogger(NAMESPACE)
        engine_logger.setLevel(level)
        engine_logger.handlers.clear()
        engine_logger.addHandler(cls._console_handler(level))

        if log_to_file:
            cls._log_dir = Path(log_dir) if log_dir else Path("logs")
            cls._log_dir.mkdir(parents=True, exist_ok=True)
            engine_logger.addHandler(cls._file_handler(cls._log_dir / LOG_FILE, level))

        cls._initialized = True

    @staticmethod
    def _console_handler(level: int) -> logging.Handler:
        handler = colorlog.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(
            colorlog.ColoredFormatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT, log_colors=LEVEL_COLORS)
        )
        return handler

    @staticmethod
    def _file_handler(path: Path, level: int) -> logging.Handler:
        handler = logging.FileHandler(path)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        return handler

    @classmethod
    def reset(cls) -> None:
        """Close and drop all handlers so the next setup() starts fresh."""
        engine_logger = logging.getLogger(NAMESPACE)
        for handler in list(engine_logger.handlers):
            handler.close()
            engine_logger.removeHandler(handler)
        cls._initialized = False
        cls._log_dir = None

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Child logger "mwa.<name>", setting up defaults if nobody has yet."""
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"{NAMESPACE}.{name}")


def get_logger(name: str) -> logging.Logger:
    return MWALogger.get_logger(name)


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
):
    """Configure engine logging (see MWALogger.setup)"""
    MWALogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file)
