"""Unit tests for ProjectTelemetry."""
from unittest.mock import MagicMock, patch

from chainstub.interface.telemetry import ProjectTelemetry, TyperConsole


def test_step_prints_and_logs():
    tel = ProjectTelemetry("Test", "blue")
    tel.console = MagicMock()
    tel.logger = MagicMock()
    tel.step("Done")
    tel.console.print.assert_called_once_with("Done", "blue")
    tel.logger.info.assert_called_once_with("Done")


def test_error_prints_to_stderr_and_logs():
    tel = ProjectTelemetry("Test", "blue")
    tel.console = MagicMock()
    tel.logger = MagicMock()
    tel.error("Failed")
    tel.console.print.assert_called_once_with("error: Failed", "red", err=True)
    tel.logger.error.assert_called_once_with("Failed")


def test_warning_prints_and_logs():
    tel = ProjectTelemetry("Test", "blue")
    tel.console = MagicMock()
    tel.logger = MagicMock()
    tel.warning("Careful")
    tel.console.print.assert_called_once_with("warning: Careful", "yellow", err=True)
    tel.logger.warning.assert_called_once_with("Careful")


def test_debug_only_logs():
    tel = ProjectTelemetry("Test", "blue")
    tel.console = MagicMock()
    tel.logger = MagicMock()
    tel.debug("Detail")
    tel.logger.debug.assert_called_once_with("Detail")
    tel.console.print.assert_not_called()


def test_logger_named_after_project():
    assert ProjectTelemetry("CHAINSTUB", "cyan").logger.name == "chainstub"


def test_console_uses_secho():
    with patch("chainstub.interface.telemetry.typer.secho") as secho:
        TyperConsole().print("hello")
        TyperConsole().print("oops", "red", err=True)
    secho.assert_any_call("hello", fg=None, err=False)
    secho.assert_any_call("oops", fg="red", err=True)
