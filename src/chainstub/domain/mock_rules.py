"""Rule store: which expression stands in for a mocked value of a given type."""

from typing import Optional

from chainstub.domain.constants import DEFAULT_RULES, PRIMITIVE_TYPES
from chainstub.domain.entities import MockRule
from chainstub.domain.errors import ConfigurationError


class RuleStore:
    """
    Ordered rule set, seeded with built-in defaults.

    Defaults are backfilled lazily on read and never replace a user rule for
    the same type. Writes are full replacements; validation is the caller's job
    (see RuleValidator).
    """

    def __init__(self, rules: Optional[list[MockRule]] = None) -> None:
        self._rules: list[MockRule] = list(rules) if rules is not None else self.default_rules()

    @staticmethod
    def default_rules() -> list[MockRule]:
        return [MockRule(type_name, expression) for type_name, expression in DEFAULT_RULES]

    @staticmethod
    def primitive_types() -> frozenset[str]:
        return PRIMITIVE_TYPES

    def get_rules(self) -> list[MockRule]:
        self._ensure_defaults()
        return list(self._rules)

    def set_rules(self, rules: list[MockRule]) -> None:
        self._rules = list(rules)

    def resolve_expression(self, type_name: str) -> Optional[str]:
        for rule in self.get_rules():
            if rule.type_name == type_name:
                return rule.expression if rule.expression.strip() else None
        return None

    def _ensure_defaults(self) -> None:
        existing = {rule.type_name for rule in self._rules}
        for default in self.default_rules():
            if default.type_name not in existing:
                self._rules.append(default)
                existing.add(default.type_name)


class RuleValidator:
    """Checks a candidate rule list before it is committed to the store."""

    @staticmethod
    def validate(rules: list[MockRule]) -> None:
        """Raise ConfigurationError naming the first offending rule."""
        seen: set[str] = set()
        for index, rule in enumerate(rules):
            type_name = rule.type_name.strip()
            if not type_name:
                raise ConfigurationError(index, rule, "type must not be blank")
            if type_name not in PRIMITIVE_TYPES and "." not in type_name:
                raise ConfigurationError(
                    index,
                    rule,
                    "type must be a builtin type name or a fully-qualified name (module.Class)",
                )
            if not rule.expression.strip():
                raise ConfigurationError(index, rule, "expression must not be blank")
            if type_name in seen:
                raise ConfigurationError(index, rule, f"duplicate type {type_name!r}")
            seen.add(type_name)
