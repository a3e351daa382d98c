import logging

from roomcrawler.cli.logs import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV_VAR, configure_logging, default_log_level


def test_default_log_level_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "debug")

    assert default_log_level() == "DEBUG"


def test_default_log_level_falls_back_on_unknown_value(monkeypatch) -> None:
    monkeypatch.setenv(LOG_LEVEL_ENV_VAR, "chatty")

    assert default_log_level() == DEFAULT_LOG_LEVEL


def test_configure_logging_applies_explicit_level(monkeypatch) -> None:
    monkeypatch.delenv(LOG_LEVEL_ENV_VAR, raising=False)

    configure_logging("INFO")
    assert logging.getLogger().level == logging.INFO

    configure_logging()
    assert logging.getLogger().level == logging.WARNING
