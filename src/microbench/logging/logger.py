"""Synchronous buffered logger."""

import sys
import traceback

from microbench.logging.config import LoggerConfig, LogLevel
from microbench.logging.handlers import BaseLogHandler
from microbench.time import time_iso8601, time_s


class Logger:
    """A synchronous logger that buffers messages and pushes them to
    configured handlers when the buffer fills up, ages out, or on severity.

    Benchmarks run on the calling thread, so the logger never starts threads
    or tasks of its own.
    """

    def __init__(
        self,
        name: str = "",
        config: LoggerConfig | None = None,
        handlers: list[BaseLogHandler] | None = None,
    ):
        """Initializes a Logger with specified configuration and handlers.

        Args:
            name (str): Name of the logger. Defaults to an empty string.
            config (LoggerConfig): Configuration settings for the logger (base level, stdout, buffer size, etc.).
            handlers (list[BaseLogHandler], optional): A list of handler objects that inherit from BaseLogHandler.
                Defaults to an empty list if not provided.

        Raises:
            TypeError: If one of the provided handlers does not inherit from BaseLogHandler.

        """
        self._name = name

        self._config = config
        if self._config is None:
            self._config = LoggerConfig()

        self._handlers = handlers
        if self._handlers is None:
            self._handlers = []

        for handler in self._handlers:
            if not isinstance(handler, BaseLogHandler):
                raise TypeError(
                    f"Invalid handler type; expected BaseLogHandler but got {type(handler).__name__}"
                )

            # Forwards str_format and level to handlers that format on their own.
            handler.add_primary_config(self._config)

        self._buffer: list[str] = []
        self._buffer_start_time_s = time_s()
        self._is_running = True

    def flush(self) -> None:
        """Pushes the log message buffer to all handlers."""
        if not self._buffer:
            return

        pending = self._buffer
        self._buffer = []
        self._buffer_start_time_s = time_s()

        for handler in self._handlers:
            try:
                handler.push(pending)
            except Exception:
                traceback.print_exc(file=sys.stderr)

    def _process_log(self, level: LogLevel, msg: str):
        """Formats, echoes and buffers a message that passed the level check.

        Args:
            level (LogLevel): The severity level of the message.
            msg (str): The actual log message.

        """
        log_msg = self._config.str_format % {
            "asctime": time_iso8601(),
            "name": self._name,
            "levelname": level.name,
            "message": msg,
        }

        if self._config.do_stdout:
            print(log_msg)

        self._buffer.append(log_msg)

        is_buffer_full = len(self._buffer) >= self._config.buffer_size
        is_buffer_old = (
            time_s() - self._buffer_start_time_s
        ) >= self._config.flush_interval_s
        if level >= LogLevel.ERROR or is_buffer_full or is_buffer_old:
            self.flush()

    def _log(self, level: LogLevel, msg: str) -> None:
        if self._is_running and level >= self._config.base_level:
            self._process_log(level, msg)

    def set_log_level(self, level: LogLevel) -> None:
        """Modify the logger's base log level at runtime.

        Args:
            level (LogLevel): The new base log level.

        """
        self.debug(f"Changing base log level from {self._config.base_level.name} to {level.name}")
        self._config.base_level = level
        for handler in self._handlers:
            handler.add_primary_config(self._config)

    def trace(self, msg: str) -> None:
        """Send a trace-level log message."""
        self._log(LogLevel.TRACE, msg)

    def debug(self, msg: str) -> None:
        """Send a debug-level log message."""
        self._log(LogLevel.DEBUG, msg)

    def info(self, msg: str) -> None:
        """Send an info-level log message."""
        self._log(LogLevel.INFO, msg)

    def warning(self, msg: str) -> None:
        """Send a warning-level log message."""
        self._log(LogLevel.WARNING, msg)

    def error(self, msg: str) -> None:
        """Send an error-level log message; flushes immediately."""
        self._log(LogLevel.ERROR, msg)

    def shutdown(self) -> None:
        """Flushes remaining messages and closes handlers. Later messages are dropped."""
        if not self._is_running:
            return
        self.flush()
        self._is_running = False
        for handler in self._handlers:
            handler.close()

    def is_running(self) -> bool:
        """Check if the logger is accepting messages."""
        return self._is_running

    def get_name(self) -> str:
        """Get the name of the logger."""
        return self._name

    def get_config(self) -> LoggerConfig:
        """Get the configuration of the logger."""
        return self._config
