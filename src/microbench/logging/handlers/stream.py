import sys
from typing import TextIO

from microbench.logging.handlers.base import BaseLogHandler


class StreamLogHandler(BaseLogHandler):
    """
    A log handler that writes log messages to a text stream, stderr by default.
    The stream is never closed by the handler.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream if stream is not None else sys.stderr

    def push(self, buffer: list[str]) -> None:
        self.stream.write("\n".join(buffer) + "\n")
        self.stream.flush()
