"""CLI entry points for chainstub - Thin Controller using Typer."""

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import typer

from chainstub.domain.config import ConfigurationLoader
from chainstub.domain.entities import EditorContext, Position, Selection
from chainstub.domain.errors import ConfigurationError, RuleNotFoundError, SourceError
from chainstub.domain.mock_rules import RuleStore
from chainstub.domain.protocols import EditorGatewayProtocol, RuleSettingsProtocol, TelemetryPort
from chainstub.domain.services.name_synthesizer import NameSynthesizer
from chainstub.use_cases.edit_mock_rules import EditMockRulesUseCase
from chainstub.use_cases.transform_statements import (
    DecomposeChainUseCase,
    StubDeclarationUseCase,
    TransformStatementsUseCase,
)

# B008: avoid function call in default; use module-level singletons for Typer options
_FILE_ARGUMENT = typer.Argument(..., exists=True, dir_okay=False, help="Python source file to edit")
_LINE_OPTION = typer.Option(..., "--line", "-l", help="Caret line (1-based)")
_COLUMN_OPTION = typer.Option(None, "--column", "-c", help="Caret column (1-based); omit to match the whole line")
_END_LINE_OPTION = typer.Option(None, "--end-line", help="Selection end line; turns the caret into a selection")
_END_COLUMN_OPTION = typer.Option(None, "--end-column", help="Selection end column (default: end of line)")
_DRY_RUN_OPTION = typer.Option(False, "--dry-run", help="Print a unified diff instead of writing the file")
_CHECK_OPTION = typer.Option(False, "--check", help="Only report whether the action is available (exit 0/1)")


@dataclass(frozen=True)
class CLIDependencies:
    """Explicit dependencies for the CLI. All dependencies injected at composition root."""

    config_loader: ConfigurationLoader
    telemetry: TelemetryPort
    editor_gateway: EditorGatewayProtocol
    rule_store: RuleStore
    rule_settings: RuleSettingsProtocol
    name_synthesizer: NameSynthesizer


class CLIAppFactory:
    """Creates the Typer app."""

    @staticmethod
    def build_context(
        file: Path,
        line: int,
        column: Optional[int],
        end_line: Optional[int],
        end_column: Optional[int],
    ) -> EditorContext:
        caret = Position(line, column)
        if end_line is None:
            return EditorContext(file_path=str(file), caret=caret)
        return EditorContext(
            file_path=str(file),
            caret=caret,
            selection=Selection(start=caret, end=Position(end_line, end_column)),
        )

    @staticmethod
    def run_transform(
        deps: CLIDependencies,
        use_case: TransformStatementsUseCase,
        context: EditorContext,
        dry_run: bool,
        check: bool,
    ) -> None:
        """Shared body of the `chain` and `stub` commands."""
        try:
            available = use_case.is_available(context)
            if check:
                typer.echo("available" if available else "not available")
                sys.exit(0 if available else 1)
            if not available:
                line = context.caret.line if context.caret else 0
                deps.telemetry.error(f"{use_case.title} is not available at line {line} of {context.file_path}")
                sys.exit(1)
            outcome = use_case.execute(context, dry_run=dry_run)
        except SourceError as e:
            deps.telemetry.error(str(e))
            sys.exit(1)

        if dry_run:
            typer.echo(outcome.preview, nl=False)
        elif outcome.modified:
            deps.telemetry.step(f"Rewrote {outcome.applied} statement(s) in {context.file_path}")
        if outcome.applied == 0:
            sys.exit(1)

    @staticmethod
    def create_app(deps: CLIDependencies) -> typer.Typer:
        """Create the Typer app with explicitly injected dependencies."""
        app = typer.Typer(
            name="chainstub",
            help="Turn call chains in tests into mockito mocks and stubs.",
            add_completion=False,
        )
        rules_app = typer.Typer(help="Edit the type -> mock expression rules.")
        app.add_typer(rules_app, name="rules")

        def transform_use_case(cls: type[TransformStatementsUseCase]) -> TransformStatementsUseCase:
            return cls(
                editor_gateway=deps.editor_gateway,
                rules=deps.rule_store,
                names=deps.name_synthesizer,
                telemetry=deps.telemetry,
                fallback_expression=deps.config_loader.fallback_expression,
            )

        def rules_use_case() -> EditMockRulesUseCase:
            return EditMockRulesUseCase(deps.rule_store, deps.rule_settings, deps.telemetry)

        @app.command()
        def chain(
            file: Path = _FILE_ARGUMENT,
            line: int = _LINE_OPTION,
            column: Optional[int] = _COLUMN_OPTION,
            end_line: Optional[int] = _END_LINE_OPTION,
            end_column: Optional[int] = _END_COLUMN_OPTION,
            dry_run: bool = _DRY_RUN_OPTION,
            check: bool = _CHECK_OPTION,
        ) -> None:
            """Replace `x = a.b().c()` with one mock and one stub per call."""
            context = CLIAppFactory.build_context(file, line, column, end_line, end_column)
            CLIAppFactory.run_transform(deps, transform_use_case(DecomposeChainUseCase), context, dry_run, check)

        @app.command()
        def stub(
            file: Path = _FILE_ARGUMENT,
            line: int = _LINE_OPTION,
            column: Optional[int] = _COLUMN_OPTION,
            end_line: Optional[int] = _END_LINE_OPTION,
            end_column: Optional[int] = _END_COLUMN_OPTION,
            dry_run: bool = _DRY_RUN_OPTION,
            check: bool = _CHECK_OPTION,
        ) -> None:
            """Replace `x = a.b()` with a mock of its type and a stub of the call."""
            context = CLIAppFactory.build_context(file, line, column, end_line, end_column)
            CLIAppFactory.run_transform(deps, transform_use_case(StubDeclarationUseCase), context, dry_run, check)

        @rules_app.command("list")
        def list_rules() -> None:
            """Show the rules in the order they are matched."""
            for rule in rules_use_case().rows():
                typer.echo(f"{rule.type_name}\t{rule.expression}")

        def run_rules_edit(action: Callable[[], object]) -> None:
            try:
                action()
            except ConfigurationError as e:
                deps.telemetry.error(str(e))
                sys.exit(2)
            except RuleNotFoundError as e:
                deps.telemetry.error(str(e))
                sys.exit(1)

        @rules_app.command("add")
        def add_rule(
            type_name: str = typer.Argument(..., help="builtin name (str) or module.Class"),
            expression: str = typer.Argument(..., help="Python expression producing the value"),
        ) -> None:
            """Append a rule."""
            run_rules_edit(lambda: rules_use_case().add(type_name, expression))

        @rules_app.command("edit")
        def edit_rule(
            type_name: str = typer.Argument(..., help="Type of the rule to change"),
            expression: str = typer.Argument(..., help="New expression"),
            new_type: str = typer.Option("", "--type", help="Rename the rule's type"),
        ) -> None:
            """Change the expression (and optionally the type) of a rule."""
            run_rules_edit(lambda: rules_use_case().edit(type_name, expression, new_type))

        @rules_app.command("remove")
        def remove_rule(
            type_name: str = typer.Argument(..., help="Type of the rule to drop"),
        ) -> None:
            """Remove a rule. Built-in defaults return with their default expression."""
            run_rules_edit(lambda: rules_use_case().remove(type_name))

        @rules_app.command("reset")
        def reset_rules() -> None:
            """Restore the built-in defaults."""
            run_rules_edit(lambda: rules_use_case().reset())

        return app
