"""Use Case: Edit the type -> mock expression rule table."""

from chainstub.domain.entities import MockRule
from chainstub.domain.errors import RuleNotFoundError
from chainstub.domain.mock_rules import RuleStore, RuleValidator
from chainstub.domain.protocols import RuleSettingsProtocol, TelemetryPort


class EditMockRulesUseCase:
    """
    Every mutation builds a candidate table, validates it as a whole and only
    then replaces the store and the saved document. A failed validation leaves
    both untouched.
    """

    def __init__(
        self,
        rule_store: RuleStore,
        settings: RuleSettingsProtocol,
        telemetry: TelemetryPort,
    ) -> None:
        self.rule_store = rule_store
        self.settings = settings
        self.telemetry = telemetry

    def rows(self) -> list[MockRule]:
        return self.rule_store.get_rules()

    def add(self, type_name: str, expression: str) -> list[MockRule]:
        return self.apply([*self.rows(), MockRule(type_name.strip(), expression.strip())])

    def edit(self, type_name: str, expression: str, new_type_name: str = "") -> list[MockRule]:
        rows = self.rows()
        index = self._index_of(rows, type_name.strip())
        rows[index] = MockRule(new_type_name.strip() or rows[index].type_name, expression.strip())
        return self.apply(rows)

    def remove(self, type_name: str) -> list[MockRule]:
        """Drop a rule. Built-in defaults come back with their default expression."""
        rows = self.rows()
        del rows[self._index_of(rows, type_name.strip())]
        return self.apply(rows)

    def reset(self) -> list[MockRule]:
        return self.apply(RuleStore.default_rules())

    def apply(self, rows: list[MockRule]) -> list[MockRule]:
        """Validate, then commit to the store and persist."""
        RuleValidator.validate(rows)
        self.rule_store.set_rules(rows)
        saved = self.rule_store.get_rules()
        self.settings.save(saved)
        self.telemetry.step(f"Saved {len(saved)} mock rules")
        return saved

    @staticmethod
    def _index_of(rows: list[MockRule], type_name: str) -> int:
        for index, rule in enumerate(rows):
            if rule.type_name == type_name:
                return index
        raise RuleNotFoundError(f"No mock rule for type {type_name!r}")
