"""Logger levels and configuration."""

from enum import IntEnum
from typing import Self

from msgspec import Struct

DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


class LogLevel(IntEnum):
    """Severity, lowest first."""

    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARNING = 3
    ERROR = 4


class LoggerConfig(Struct, kw_only=True):
    """Settings shared by a logger and its handlers.

    Not frozen: ``Logger.set_log_level`` changes ``base_level`` in place.

    Args:
        base_level: Messages below this level are dropped.
        do_stdout: Echo every accepted message to stdout.
        str_format: %-style template with the keys asctime, levelname, name
            and message; message is mandatory.
        flush_interval_s: Age of the oldest buffered message that forces a
            push to the handlers.
        buffer_size: Buffered message count that forces a push.

    Raises:
        ValueError: If the format lacks ``%(message)s`` or a limit is not
            positive.
    """

    base_level: LogLevel = LogLevel.INFO
    do_stdout: bool = True
    str_format: str = DEFAULT_FORMAT
    flush_interval_s: float = 1.0
    buffer_size: int = 10000

    def __post_init__(self):
        if "%(message)s" not in self.str_format:
            raise ValueError("str_format must contain the '%(message)s' key")
        if self.flush_interval_s <= 0.0:
            raise ValueError(
                f"Invalid flush_interval_s; must be greater than 0, got {self.flush_interval_s}"
            )
        if self.buffer_size <= 0:
            raise ValueError(f"Invalid buffer_size; must be greater than 0, got {self.buffer_size}")

    @classmethod
    def default(cls) -> Self:
        """INFO and above, echoed to stdout."""
        return cls()

    @classmethod
    def quiet(cls, base_level: LogLevel = LogLevel.WARNING) -> Self:
        """Handlers only, nothing on stdout; used by the engine when no logger is given."""
        return cls(base_level=base_level, do_stdout=False)
