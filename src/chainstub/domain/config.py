"""Configuration for the mock scaffolding engine, read from [tool.chainstub]."""

import logging
from typing import Optional

from chainstub.domain.constants import (
    DEFAULT_NAMING_STYLE,
    DEFAULT_SETTINGS_FILE,
    FALLBACK_MOCK_EXPRESSION,
    NAMING_STYLES,
)


class ConfigurationLoader:
    """
    Typed access to the [tool.chainstub] table.

    The table itself is loaded by infrastructure (ConfigFileLoader) at the
    composition root; this class only interprets values and applies defaults.
    """

    def __init__(
        self,
        config: Optional[dict[str, object]] = None,
        project_root: Optional[str] = None,
    ) -> None:
        self._config: dict[str, object] = dict(config or {})
        self._project_root = project_root
        self.validate_config(self._config)

    def validate_config(self, config: dict[str, object]) -> None:
        """Warn about values that will be ignored in favour of defaults."""
        naming = config.get("naming")
        if naming is not None and naming not in NAMING_STYLES:
            logging.warning(
                "Configuration Warning: naming=%r is not one of %s; using %r.",
                naming,
                sorted(NAMING_STYLES),
                DEFAULT_NAMING_STYLE,
            )
        fallback = config.get("fallback_expression")
        if fallback is not None and (not isinstance(fallback, str) or not fallback.strip()):
            logging.warning(
                "Configuration Warning: fallback_expression must be a non-blank string; using %r.",
                FALLBACK_MOCK_EXPRESSION,
            )

    @property
    def config(self) -> dict[str, object]:
        return self._config

    @property
    def project_root(self) -> Optional[str]:
        return self._project_root

    @property
    def naming_style(self) -> str:
        naming = self._config.get("naming")
        if isinstance(naming, str) and naming in NAMING_STYLES:
            return naming
        return DEFAULT_NAMING_STYLE

    @property
    def settings_file(self) -> str:
        value = self._config.get("settings_file")
        if isinstance(value, str) and value.strip():
            return value
        return DEFAULT_SETTINGS_FILE

    @property
    def fallback_expression(self) -> str:
        value = self._config.get("fallback_expression")
        if isinstance(value, str) and value.strip():
            return value
        return FALLBACK_MOCK_EXPRESSION
