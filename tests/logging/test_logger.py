"""Tests for the buffered logger and its handlers."""

import io

import pytest

from microbench.logging import (
    BaseLogHandler,
    FileLogHandler,
    Logger,
    LoggerConfig,
    LogLevel,
    StreamLogHandler,
)


class RecordingHandler(BaseLogHandler):
    """Handler that records payloads for assertions."""

    def __init__(self, should_raise: bool = False) -> None:
        super().__init__()
        self.should_raise = should_raise
        self.invocations: list[tuple[str, ...]] = []
        self.closed = False

    def push(self, buffer: list[str]) -> None:
        if self.should_raise:
            raise RuntimeError("intentional handler failure")
        self.invocations.append(tuple(buffer))

    def close(self) -> None:
        self.closed = True


def _quiet(**kwargs) -> LoggerConfig:
    return LoggerConfig(do_stdout=False, **kwargs)


class TestLoggerConfig:
    """Validate LoggerConfig inputs."""

    def test_default_values(self) -> None:
        cfg = LoggerConfig()
        assert cfg.base_level == LogLevel.INFO
        assert cfg.do_stdout is True
        assert cfg.flush_interval_s == 1.0
        assert cfg.buffer_size == 10000

    def test_invalid_flush_interval(self) -> None:
        with pytest.raises(ValueError):
            LoggerConfig(flush_interval_s=0.0)

    def test_invalid_buffer_size(self) -> None:
        with pytest.raises(ValueError):
            LoggerConfig(buffer_size=0)

    def test_format_requires_message(self) -> None:
        with pytest.raises(ValueError):
            LoggerConfig(str_format="%(asctime)s [%(levelname)s]")

    def test_settings_are_keyword_only(self) -> None:
        with pytest.raises(TypeError):
            LoggerConfig(LogLevel.DEBUG)

    def test_default_matches_constructor(self) -> None:
        assert LoggerConfig.default() == LoggerConfig()

    def test_quiet_keeps_stdout_clean(self) -> None:
        cfg = LoggerConfig.quiet()
        assert cfg.do_stdout is False
        assert cfg.base_level == LogLevel.WARNING
        assert LoggerConfig.quiet(LogLevel.TRACE).base_level == LogLevel.TRACE

    def test_level_change_is_shared_with_logger(self) -> None:
        cfg = LoggerConfig.quiet(LogLevel.ERROR)
        logger = Logger(name="shared", config=cfg, handlers=[RecordingHandler()])
        logger.set_log_level(LogLevel.DEBUG)
        assert logger.get_config() is cfg
        assert cfg.base_level == LogLevel.DEBUG


class TestLoggerBehavior:
    """Level filtering, buffering and flushing."""

    def test_buffer_full_triggers_push(self) -> None:
        handler = RecordingHandler()
        logger = Logger(name="full", config=_quiet(buffer_size=2), handlers=[handler])
        logger.info("one")
        assert handler.invocations == []
        logger.info("two")
        assert len(handler.invocations) == 1
        assert len(handler.invocations[0]) == 2

    def test_error_flushes_immediately(self) -> None:
        handler = RecordingHandler()
        logger = Logger(name="err", config=_quiet(), handlers=[handler])
        logger.error("broken")
        assert any("broken" in line for line in handler.invocations[0])

    def test_level_filter_and_runtime_change(self) -> None:
        handler = RecordingHandler()
        logger = Logger(
            name="levels",
            config=_quiet(base_level=LogLevel.WARNING, buffer_size=1),
            handlers=[handler],
        )
        logger.info("hidden")
        assert handler.invocations == []

        logger.set_log_level(LogLevel.TRACE)
        logger.trace("visible")
        assert any("visible" in line for call in handler.invocations for line in call)
        assert handler.primary_config.base_level == LogLevel.TRACE

    def test_format_contains_fields(self) -> None:
        handler = RecordingHandler()
        logger = Logger(name="fmt", config=_quiet(buffer_size=1), handlers=[handler])
        logger.warning("careful")
        (line,) = handler.invocations[0]
        assert "[WARNING]" in line
        assert "fmt" in line
        assert line.endswith("careful")

    def test_stdout_echo(self, capsys) -> None:
        logger = Logger(name="echo", config=LoggerConfig())
        logger.info("to stdout")
        assert "to stdout" in capsys.readouterr().out

    def test_handler_failure_does_not_propagate(self, capsys) -> None:
        good, bad = RecordingHandler(), RecordingHandler(should_raise=True)
        logger = Logger(name="failing", config=_quiet(), handlers=[bad, good])
        logger.error("still delivered")
        assert good.invocations
        assert "intentional handler failure" in capsys.readouterr().err

    def test_shutdown_flushes_and_closes(self) -> None:
        handler = RecordingHandler()
        logger = Logger(name="bye", config=_quiet(), handlers=[handler])
        logger.info("pending")
        logger.shutdown()

        assert len(handler.invocations) == 1
        assert "pending" in handler.invocations[0][0]
        assert handler.closed
        assert not logger.is_running()

        logger.info("dropped")
        assert len(handler.invocations) == 1

    def test_invalid_handler_rejected(self) -> None:
        with pytest.raises(TypeError):
            Logger(handlers=[object()])

    def test_accessors(self) -> None:
        cfg = _quiet()
        logger = Logger(name="named", config=cfg)
        assert logger.get_name() == "named"
        assert logger.get_config() is cfg


class TestHandlers:
    def test_file_handler_requires_txt(self, tmp_path) -> None:
        with pytest.raises(ValueError):
            FileLogHandler(str(tmp_path / "log.json"))

    def test_file_handler_appends(self, tmp_path) -> None:
        path = tmp_path / "nested" / "log.txt"
        handler = FileLogHandler(str(path), create=True)
        handler.push(["a", "b"])
        handler.push(["c"])
        assert path.read_text().splitlines() == ["a", "b", "c"]

    def test_stream_handler_writes_lines(self) -> None:
        stream = io.StringIO()
        handler = StreamLogHandler(stream)
        handler.push(["x", "y"])
        handler.close()
        assert stream.getvalue() == "x\ny\n"
        assert not stream.closed
