"""TOML persistence for the mock rule list - Infrastructure implementation of RuleSettingsProtocol."""

import logging
import sys
from pathlib import Path

import tomli_w

from chainstub.domain.constants import SETTINGS_DOCUMENT_NAME
from chainstub.domain.entities import MockRule
from chainstub.domain.protocols import RuleSettingsProtocol

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib


class TomlRuleSettings(RuleSettingsProtocol):
    """
    Stores the ordered rule list as a named TOML document with a `name` key
    and a `rules` array of `{type, expression}` tables. An unreadable or
    malformed document loads as no rules, so the defaults apply until the
    next save overwrites it.
    """

    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> str:
        return str(self._path)

    def load(self) -> list[MockRule]:
        """Return the saved rules in order; an absent document yields no rules."""
        if not self._path.exists():
            return []
        try:
            with self._path.open("rb") as f:
                data = toml_lib.load(f)
        except (OSError, toml_lib.TOMLDecodeError) as e:
            logging.warning("Ignoring unreadable mock rules file %s: %s", self._path, e)
            return []

        rules: list[MockRule] = []
        for index, entry in enumerate(data.get("rules", []) or []):
            if not isinstance(entry, dict):
                logging.warning("Ignoring rule #%d in %s: not a table", index + 1, self._path)
                continue
            type_name = entry.get("type")
            expression = entry.get("expression")
            if not isinstance(type_name, str) or not isinstance(expression, str):
                logging.warning(
                    "Ignoring rule #%d in %s: 'type' and 'expression' must be strings",
                    index + 1,
                    self._path,
                )
                continue
            rules.append(MockRule(type_name, expression))
        return rules

    def save(self, rules: list[MockRule]) -> None:
        """Write the whole rule list, replacing the previous document."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "name": SETTINGS_DOCUMENT_NAME,
            "rules": [rule.to_dict() for rule in rules],
        }
        with self._path.open("wb") as f:
            tomli_w.dump(document, f)
