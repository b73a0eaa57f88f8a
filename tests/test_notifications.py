"""Tests for notification sinks"""
import io
import logging
from unittest.mock import Mock

from rocketshoes.notifications import ConsoleNotifier, LoggingNotifier, notify_error


def test_console_notifier_writes_line():
    stream = io.StringIO()

    ConsoleNotifier(stream).error("Erro na remoção do produto")

    assert stream.getvalue() == "Erro na remoção do produto\n"


def test_console_notifier_defaults_to_stderr(capsys):
    ConsoleNotifier().error("Quantidade solicitada fora de estoque")

    assert capsys.readouterr().err == "Quantidade solicitada fora de estoque\n"


def test_logging_notifier(caplog):
    with caplog.at_level(logging.WARNING):
        LoggingNotifier().error("Erro na adição do produto")

    assert "Erro na adição do produto" in caplog.text


def test_notify_error_swallows_sink_failure(caplog):
    notifier = Mock()
    notifier.error.side_effect = RuntimeError("toast container missing")

    notify_error(notifier, "Erro na adição do produto")

    notifier.error.assert_called_once_with("Erro na adição do produto")
    assert "failed" in caplog.text
