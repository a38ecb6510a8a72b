import io
import logging
import sys

from financial_import.logging_setup import configure_logging, get_logger


def test_default_handler_follows_the_current_stderr(monkeypatch):
    first = io.StringIO()
    monkeypatch.setattr(sys, "stderr", first)
    configure_logging("INFO")
    get_logger("financial_import.sample").info("first message")
    first.close()

    second = io.StringIO()
    monkeypatch.setattr(sys, "stderr", second)
    get_logger("financial_import.sample").info("second message")

    out = second.getvalue()
    assert "INFO [financial_import.sample] second message" in out
    assert "Logging error" not in out


def test_explicit_stream_and_level_adjustment():
    buf = io.StringIO()
    configure_logging("WARNING", stream=buf)
    log = get_logger("financial_import.sample")
    log.info("hidden")

    configure_logging(logging.DEBUG)
    log.debug("shown")

    assert "hidden" not in buf.getvalue()
    assert "DEBUG [financial_import.sample] shown" in buf.getvalue()


def test_unconfigured_package_logger_stays_silent(capsys):
    get_logger("financial_import.sample").warning("nobody listens")

    assert "nobody listens" not in capsys.readouterr().err
