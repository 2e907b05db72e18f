"""Buffered logging with pluggable handlers."""

from .config import (
    LoggerConfig as LoggerConfig,
)
from .config import (
    LogLevel as LogLevel,
)
from .handlers import (
    BaseLogHandler as BaseLogHandler,
)
from .handlers import (
    FileLogHandler as FileLogHandler,
)
from .handlers import (
    StreamLogHandler as StreamLogHandler,
)
from .logger import (
    Logger as Logger,
)
