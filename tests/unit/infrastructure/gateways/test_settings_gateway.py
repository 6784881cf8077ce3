"""Unit tests for TomlRuleSettings."""

import logging
import sys

from chainstub.domain.entities import MockRule
from chainstub.infrastructure.gateways.settings_gateway import TomlRuleSettings

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib


def test_load_missing_file_returns_no_rules(tmp_path):
    assert TomlRuleSettings(str(tmp_path / "none.toml")).load() == []


def test_save_then_load_keeps_order(tmp_path):
    path = tmp_path / ".chainstub" / "mocking.toml"
    settings = TomlRuleSettings(str(path))
    rules = [MockRule("app.User", "User(name='x')"), MockRule("str", '"fixed"')]

    settings.save(rules)

    assert path.exists()
    with path.open("rb") as f:
        document = toml_lib.load(f)
    assert document == {
        "name": "chainstub-mocking-settings",
        "rules": [
            {"type": "app.User", "expression": "User(name='x')"},
            {"type": "str", "expression": '"fixed"'},
        ],
    }
    assert settings.load() == rules
    assert settings.path == str(path)


def test_malformed_entries_are_skipped(tmp_path, caplog):
    path = tmp_path / "mocking.toml"
    path.write_text(
        'rules = [{ type = "int", expression = "1" }, { type = 3, expression = "x" }, "oops"]\n',
        encoding="utf-8",
    )
    with caplog.at_level(logging.WARNING):
        rules = TomlRuleSettings(str(path)).load()
    assert rules == [MockRule("int", "1")]
    assert "Ignoring rule #2" in caplog.text
    assert "Ignoring rule #3" in caplog.text


def test_unparsable_document_loads_as_no_rules(tmp_path, caplog):
    path = tmp_path / "mocking.toml"
    path.write_text("rules = [ {type = \n", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        rules = TomlRuleSettings(str(path)).load()
    assert rules == []
    assert "Ignoring unreadable mock rules file" in caplog.text


def test_save_repairs_unparsable_document(tmp_path):
    path = tmp_path / "mocking.toml"
    path.write_text("rules = [ {type = \n", encoding="utf-8")
    settings = TomlRuleSettings(str(path))

    settings.save([MockRule("int", "1")])

    assert settings.load() == [MockRule("int", "1")]
