"""Package entry point - composition root. Wire dependencies and run the CLI app."""

from chainstub.infrastructure.di.container import ChainstubContainer
from chainstub.interface.cli import CLIAppFactory, CLIDependencies


def main() -> None:
    """Entry point: wire dependencies at composition root, create app, run."""
    container = ChainstubContainer.get_instance()

    deps = CLIDependencies(
        config_loader=container.get_config_loader(),
        telemetry=container.get_telemetry_port(),
        editor_gateway=container.get_editor_gateway(),
        rule_store=container.get_rule_store(),
        rule_settings=container.get_rule_settings(),
        name_synthesizer=container.get_name_synthesizer(),
    )

    app = CLIAppFactory.create_app(deps)
    app()


if __name__ == "__main__":
    main()
