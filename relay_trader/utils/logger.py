import asyncio
import os
import queue
import signal
import logging
import threading
from pathlib import Path
from typing import Optional
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(origin)s] - %(filename)s:%(lineno)d - %(message)s"


class OriginFilter(logging.Filter):
    """
    Stamps each record with where it was produced: thread, and asyncio task
    when one is running (init steps run as ``InitStep-<name>`` tasks).

    Runs on the producing side of the queue, before the listener thread
    formats the record.
    """

    def filter(self, record):
        origin = record.threadName
        try:
            task = asyncio.current_task()
        except RuntimeError:
            task = None
        if task is not None:
            origin = f"{origin}/{task.get_name()}"
        record.origin = origin
        return True


class StandardFormatter(logging.Formatter):
    def __init__(self, fmt: Optional[str] = None):
        super().__init__(fmt or _LINE_FORMAT)

    def format(self, record):
        # Records that bypassed the queue carry no origin
        if not hasattr(record, "origin"):
            record.origin = record.threadName
        return super().format(record)


class ColoredFormatter(StandardFormatter):
    _colors = {
        logging.DEBUG: "\x1b[38;20m",
        logging.INFO: "\x1b[38;20m",
        logging.WARNING: "\x1b[33;20m",
        logging.ERROR: "\x1b[31;20m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    _reset = "\x1b[0m"

    def format(self, record):
        return f"{self._colors.get(record.levelno, '')}{super().format(record)}{self._reset}"


class ThreadLogger:
    """
    Named logger whose handlers run on a background QueueListener thread.

    The event loop only enqueues records; handler I/O happens off-loop.
    SIGUSR1 makes every handler one level more verbose, SIGUSR2 one level
    quieter.
    """

    def __init__(self, *, name: str, signal_level: str = "INFO"):
        self.name = name
        self.log_queue: queue.Queue = queue.Queue(-1)
        self.handlers: list[logging.Handler] = []
        self.listener: QueueListener | None = None

        level_name = signal_level.upper()
        if level_name not in _LEVELS:
            print(f"Invalid signal level '{signal_level}', using INFO")
            level_name = "INFO"
        self.signal_level = getattr(logging, level_name)

        queue_handler = QueueHandler(self.log_queue)
        queue_handler.addFilter(OriginFilter())

        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        # A second client in the process replaces the first one's queue
        self.logger.handlers = [queue_handler]

        self._install_signal_handlers()

    def get_logger(self) -> logging.Logger:
        return self.logger

    def add_handler(self, handler: logging.Handler):
        self.handlers.append(handler)
        self._rebuild_listener()
        self.logger.debug(f"Log handler added: {type(handler).__name__}")

    def remove_handler(self, handler: logging.Handler):
        if handler not in self.handlers:
            return
        self.handlers.remove(handler)
        self._rebuild_listener()

    def set_all_handler_levels(self, level):
        if isinstance(level, str):
            level = getattr(logging, level.upper(), logging.INFO)
        self.signal_level = level
        for handler in self.handlers:
            handler.setLevel(level)
        self.logger.info(f"Log handlers now at {logging.getLevelName(level)}")

    def adjust_verbosity(self, steps: int):
        """Move every handler `steps` levels quieter (positive) or louder (negative)."""
        level = min(max(self.signal_level + 10 * steps, logging.DEBUG), logging.CRITICAL)
        if level != self.signal_level:
            self.set_all_handler_levels(level)

    def shutdown(self) -> bool:
        """Stop the listener, flushing queued records. False when none was running."""
        listener, self.listener = self.listener, None
        if listener is None:
            return False
        listener.stop()
        return True

    def _rebuild_listener(self):
        # QueueListener takes its handlers at construction
        self.shutdown()
        if self.handlers:
            self.listener = QueueListener(self.log_queue, *self.handlers, respect_handler_level=True)
            self.listener.start()

    def _install_signal_handlers(self):
        if not hasattr(signal, "SIGUSR1") or threading.current_thread() is not threading.main_thread():
            return
        signal.signal(signal.SIGUSR1, self._on_signal)
        signal.signal(signal.SIGUSR2, self._on_signal)
        self.logger.debug(f"Verbosity control: kill -USR1/-USR2 {os.getpid()}")

    def _on_signal(self, signum, frame):
        self.adjust_verbosity(-1 if signum == signal.SIGUSR1 else 1)


def create_console_handler(*, level=logging.INFO, colored: bool = True) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(ColoredFormatter() if colored else StandardFormatter())
    return handler


def create_file_handler(*, log_file: str, level=logging.DEBUG, rotate_when: Optional[str] = "midnight", backup_count: int = 10) -> logging.Handler:
    """File handler rotated on `rotate_when` (a TimedRotatingFileHandler `when`); None disables rotation."""
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    if rotate_when:
        handler = TimedRotatingFileHandler(path, when=rotate_when, backupCount=backup_count)
    else:
        handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(StandardFormatter())
    return handler
