"""Unit tests for ConfigurationLoader."""

import logging

from chainstub.domain.config import ConfigurationLoader
from chainstub.domain.constants import DEFAULT_SETTINGS_FILE, FALLBACK_MOCK_EXPRESSION


def test_defaults_when_table_is_empty():
    loader = ConfigurationLoader()
    assert loader.naming_style == "snake"
    assert loader.settings_file == DEFAULT_SETTINGS_FILE
    assert loader.fallback_expression == FALLBACK_MOCK_EXPRESSION
    assert loader.project_root is None


def test_values_from_table():
    loader = ConfigurationLoader(
        {"naming": "camel", "settings_file": "conf/rules.toml", "fallback_expression": "mock(strict=False)"},
        "/work",
    )
    assert loader.naming_style == "camel"
    assert loader.settings_file == "conf/rules.toml"
    assert loader.fallback_expression == "mock(strict=False)"
    assert loader.project_root == "/work"


def test_invalid_values_warn_and_fall_back(caplog):
    with caplog.at_level(logging.WARNING):
        loader = ConfigurationLoader({"naming": "kebab", "fallback_expression": " "})
    assert loader.naming_style == "snake"
    assert loader.fallback_expression == FALLBACK_MOCK_EXPRESSION
    assert "naming='kebab'" in caplog.text
    assert "fallback_expression" in caplog.text
