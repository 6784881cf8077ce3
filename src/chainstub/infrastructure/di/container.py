from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, cast

from chainstub.domain.config import ConfigurationLoader
from chainstub.domain.mock_rules import RuleStore
from chainstub.domain.services.name_synthesizer import NameSynthesizer
from chainstub.infrastructure.config_file_loader import ConfigFileLoader
from chainstub.infrastructure.gateways.astroid_gateway import AstroidGateway
from chainstub.infrastructure.gateways.libcst_editor_gateway import LibCSTEditorGateway
from chainstub.infrastructure.gateways.settings_gateway import TomlRuleSettings
from chainstub.interface.telemetry import ProjectTelemetry

if TYPE_CHECKING:
    from chainstub.domain.protocols import (
        EditorGatewayProtocol,
        RuleSettingsProtocol,
        TelemetryPort,
    )


class ChainstubContainer:
    """Dependency Injection Container for chainstub."""

    _instance: Optional["ChainstubContainer"] = None

    def __init__(self, start: Optional[Path] = None) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults(start)

    def _register_defaults(self, start: Optional[Path]) -> None:
        """Register default implementations for protocols."""
        config_dict, project_root = ConfigFileLoader.load_config_from_fs(start)
        config_loader = ConfigurationLoader(config_dict, project_root)
        self.register_singleton("ConfigurationLoader", config_loader)

        self.register_singleton("TelemetryPort", ProjectTelemetry("CHAINSTUB", "cyan"))

        astroid_gateway = AstroidGateway()
        self.register_singleton("AstroidGateway", astroid_gateway)
        self.register_singleton("LibCSTEditorGateway", LibCSTEditorGateway(astroid_gateway))

        # Saved rules seed the store; defaults are backfilled on read
        base = Path(project_root) if project_root else (start or Path.cwd())
        rule_settings = TomlRuleSettings(str(base / config_loader.settings_file))
        self.register_singleton("RuleSettings", rule_settings)
        saved = rule_settings.load()
        self.register_singleton("RuleStore", RuleStore(saved if saved else None))

        self.register_singleton("NameSynthesizer", NameSynthesizer(config_loader.naming_style))

    # JUSTIFICATION: DI Container must handle any type of service
    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    # JUSTIFICATION: DI Container must return any type of service
    def get(self, key: str) -> Any:
        """Retrieve a dependency by key. Prefer explicit get_* methods for type safety."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_config_loader(self) -> ConfigurationLoader:
        """Return the configuration loader (created at composition root)."""
        return cast(ConfigurationLoader, self.get("ConfigurationLoader"))

    def get_telemetry_port(self) -> "TelemetryPort":
        """Return the telemetry/UI port."""
        return cast("TelemetryPort", self.get("TelemetryPort"))

    def get_astroid_gateway(self) -> AstroidGateway:
        """Return the Astroid gateway."""
        return cast(AstroidGateway, self.get("AstroidGateway"))

    def get_editor_gateway(self) -> "EditorGatewayProtocol":
        """Return the LibCST editor gateway."""
        return cast("EditorGatewayProtocol", self.get("LibCSTEditorGateway"))

    def get_rule_settings(self) -> "RuleSettingsProtocol":
        """Return the persisted rule settings."""
        return cast("RuleSettingsProtocol", self.get("RuleSettings"))

    def get_rule_store(self) -> RuleStore:
        return cast(RuleStore, self.get("RuleStore"))

    def get_name_synthesizer(self) -> NameSynthesizer:
        return cast(NameSynthesizer, self.get("NameSynthesizer"))

    @classmethod
    def get_instance(cls) -> "ChainstubContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = ChainstubContainer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None
