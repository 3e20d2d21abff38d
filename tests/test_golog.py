import datetime
import io

import pytest

from trojango import colorful, logger
from trojango.golog import INFO_PREFIX, Logger
from trojango.logger import EmptyLogger, LogLevel


@pytest.fixture
def sink():
    return io.BytesIO()


@pytest.fixture
def restore_global():
    yield
    logger.register_logger(EmptyLogger())


def test_info_line_has_prefix_and_newline(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.info("hello", "world")
    assert sink.getvalue() == b"[INFO]  hello world\n"


def test_warnf_formats_arguments(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.warnf("%s=%d", "a", 1)
    assert sink.getvalue() == b"[WARN]  a=1\n"


def test_go_style_verb_is_accepted(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.infof("%v items", 3)
    assert sink.getvalue() == INFO_PREFIX.plain + b"3 items\n"


def test_trailing_newline_is_not_doubled(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.infof("line\n")
    assert sink.getvalue() == INFO_PREFIX.plain + b"line\n"


def test_level_filters_lower_messages(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.set_log_level(LogLevel.ERROR)
    lg.info("hidden")
    lg.warn("hidden")
    lg.debug("hidden")
    lg.error("shown")
    lines = sink.getvalue().decode().splitlines()
    assert len(lines) == 1
    assert lines[0][:8] == "[ERROR] "


def test_debug_hidden_above_all_level(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.set_log_level(LogLevel.INFO)
    lg.debug("x")
    lg.trace("x")
    lg.info("shown")
    assert sink.getvalue() == INFO_PREFIX.plain + b"shown\n"


def test_quiet_suppresses_output(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.quiet()
    assert lg.is_quiet() is True
    lg.info("nothing")
    assert sink.getvalue() == b""
    lg.no_quiet()
    assert lg.is_quiet() is False
    lg.info("back")
    assert sink.getvalue() == INFO_PREFIX.plain + b"back\n"


def test_debug_flag_round_trip(sink):
    lg = Logger(sink)
    assert lg.with_debug().is_debug() is True
    assert lg.without_debug().is_debug() is False


def test_color_output_uses_colored_prefix(sink):
    lg = Logger(sink).without_timestamp().with_color()
    lg.info("hi")
    assert sink.getvalue() == colorful.green(b"[INFO]  ") + b"hi\n"


def test_timestamp_format(sink):
    lg = Logger(sink).without_color()
    before = datetime.datetime.now().replace(microsecond=0)
    lg.info("hello")
    text = sink.getvalue().decode()
    assert text[:8] == "[INFO]  "
    stamp = datetime.datetime.strptime(text[8:27], "%Y/%m/%d %H:%M:%S")
    assert abs(stamp - before) <= datetime.timedelta(seconds=5)
    assert text[27:] == " hello\n"


def test_error_reports_caller_file(sink, restore_global):
    lg = Logger(sink).without_timestamp().without_color()
    logger.register_logger(lg)
    logger.error("bad")
    text = sink.getvalue().decode()
    assert text[:8] == "[ERROR] "
    assert ("test_error_reports_caller_file:test_golog.py:" in text) is True
    assert text[-5:] == " bad\n"


def test_fatal_writes_and_exits(sink):
    lg = Logger(sink).without_timestamp().without_color()
    with pytest.raises(SystemExit) as info:
        lg.fatal("dead")
    assert info.value.code == 1
    assert sink.getvalue()[:8] == b"[FATAL] "


def test_fatal_at_off_level_exits_silently(sink):
    lg = Logger(sink).without_timestamp().without_color()
    lg.set_log_level(LogLevel.OFF)
    with pytest.raises(SystemExit) as info:
        lg.fatalf("%s", "dead")
    assert info.value.code == 1
    assert sink.getvalue() == b""


def test_set_output_text_stream(sink):
    lg = Logger(sink).without_timestamp().without_color()
    stream = io.StringIO()
    lg.set_output(stream)
    lg.info("text")
    assert stream.getvalue() == "[INFO]  text\n"
    assert sink.getvalue() == b""