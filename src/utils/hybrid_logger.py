"""
Hybrid logging - colored console output plus a per-run log file,
with one lightweight logger per story component.
"""

import logging
import sys
import traceback
from contextlib import suppress
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional


class ColoredFormatter(logging.Formatter):
    """Formats records as [time] [level] [component] message, optionally colored"""

    COLORS = {
        'DEBUG': '\033[94m',    # Blue
        'INFO': '\033[92m',     # Green
        'WARNING': '\033[93m',  # Yellow
        'ERROR': '\033[91m',    # Red
        'CRITICAL': '\033[95m', # Magenta
        'RESET': '\033[0m'
    }

    def __init__(self, use_colors: bool = False):
        self.use_colors = use_colors
        super().__init__('[%(asctime)s] [%(levelname)s] [%(class_name)s] %(message)s')

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, 'class_name'):
            record.class_name = 'Main'

        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
            formatted = f"{color}{formatted}{self.COLORS['RESET']}"

        return formatted


class ClassLogger:
    """
    Per-component logger with its own minimum level.

    All ClassLoggers created from one HybridLogger share the same handlers,
    so console and file output stay interleaved in order.
    """

    def __init__(self, main_logger: logging.Logger, class_name: str, level: int):
        self.main_logger = main_logger
        self.class_name = class_name
        self.level = level

    def _log(self, level: int, message: str, exc_info: bool = False) -> None:
        if level < self.level:
            return
        exc_info_tuple = sys.exc_info() if exc_info else None
        record = self.main_logger.makeRecord(
            self.main_logger.name, level, "", 0, message, (), exc_info_tuple
        )
        record.class_name = self.class_name
        self.main_logger.handle(record)

    def debug(self, message: str) -> None:
        self._log(logging.DEBUG, message)

    def info(self, message: str) -> None:
        self._log(logging.INFO, message)

    def warning(self, message: str) -> None:
        self._log(logging.WARNING, message)

    def error(self, message: str, exception: Optional[Exception] = None) -> None:
        """
        Log an error, appending type/file/line details when an exception is given.

        Errors are flushed immediately so they survive a crash.
        """
        if exception:
            exc_type = type(exception).__name__
            tb = traceback.extract_tb(exception.__traceback__)
            filename, lineno, _func, _text = tb[-1] if tb else ("unknown", 0, "unknown", "")
            message = f"{message} | Type: {exc_type} | File: {filename} | Line: {lineno}"
            self._log(logging.ERROR, message, exc_info=True)
        else:
            self._log(logging.ERROR, message)
        self.flush()

    def critical(self, message: str) -> None:
        self._log(logging.CRITICAL, message)
        self.flush()

    def create_class_logger(self, class_name: str, level: Optional[int] = None) -> 'ClassLogger':
        """
        Create a sibling logger for another component on the same handlers.

        Args:
            class_name: Component name shown in the [component] column
            level: Minimum level (defaults to this logger's level)

        Returns:
            New ClassLogger instance
        """
        return ClassLogger(self.main_logger, class_name, self.level if level is None else level)

    def flush(self) -> None:
        """Flush every handler of the shared logger"""
        for handler in self.main_logger.handlers:
            with suppress(OSError, ValueError):
                handler.flush()


class HybridLogger:
    """Logger factory: colored stdout plus a timestamped file in log_dir"""

    def __init__(self, name: str = "spellcards", log_dir: str = "logs", console: bool = True):
        self.name = name
        self.log_dir = log_dir
        self.console = console
        self.log_file: Optional[Path] = None
        self.main_logger: Optional[logging.Logger] = None
        self.class_loggers: Dict[str, ClassLogger] = {}
        self._setup_main_logger()

    def _setup_main_logger(self) -> None:
        Path(self.log_dir).mkdir(parents=True, exist_ok=True)
        self.log_file = Path(self.log_dir) / f"{self.name}_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"

        self.main_logger = logging.getLogger(self.name)
        self.main_logger.setLevel(logging.DEBUG)
        self.main_logger.propagate = False

        # Re-creating a HybridLogger with the same name replaces its handlers
        self.main_logger.handlers.clear()

        if self.console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(ColoredFormatter(use_colors=True))
            self.main_logger.addHandler(console_handler)

        file_handler = logging.FileHandler(self.log_file, encoding="utf-8")
        file_handler.setFormatter(ColoredFormatter(use_colors=False))
        self.main_logger.addHandler(file_handler)

    def get_class_logger(self, class_name: str, level: int = logging.INFO) -> ClassLogger:
        """
        Get (or create) the logger for a component.

        Args:
            class_name: Component name for log identification
            level: Minimum log level (logging.DEBUG, INFO, WARNING, ERROR, CRITICAL)

        Returns:
            ClassLogger for the component
        """
        if class_name not in self.class_loggers:
            self.class_loggers[class_name] = ClassLogger(self.main_logger, class_name, level)
        return self.class_loggers[class_name]

    def get_main_logger(self, level: int = logging.INFO) -> ClassLogger:
        return self.get_class_logger("Main", level)

    def cleanup(self) -> None:
        """Flush and close every handler"""
        if self.main_logger:
            for handler in self.main_logger.handlers:
                with suppress(OSError, ValueError):
                    handler.flush()
                    handler.close()
            self.main_logger.handlers.clear()
