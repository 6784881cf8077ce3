"""User-facing progress lines: colored terminal output plus a logger for diagnostics."""

import logging

import typer


class TyperConsole:
    """Minimal console over typer.secho; errors go to stderr."""

    def print(self, message: str, color: str = "", err: bool = False) -> None:
        typer.secho(message, fg=color or None, err=err)


class ProjectTelemetry:
    """TelemetryPort implementation for the chainstub CLI."""

    def __init__(self, project_name: str, color: str) -> None:
        self.project_name = project_name
        self.color = color
        self.console = TyperConsole()
        self.logger = logging.getLogger(project_name.lower())

    def step(self, message: str) -> None:
        self.console.print(message, self.color)
        self.logger.info(message)

    def warning(self, message: str) -> None:
        self.console.print(f"warning: {message}", "yellow", err=True)
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.console.print(f"error: {message}", "red", err=True)
        self.logger.error(message)

    def debug(self, message: str) -> None:
        self.logger.debug(message)
