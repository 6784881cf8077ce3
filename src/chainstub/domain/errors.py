"""Domain errors raised by the rule store, the scaffold generator and the editor gateway."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from chainstub.domain.entities import MockRule


class ChainstubError(Exception):
    """Base class for every error the engine raises on purpose."""


class ConfigurationError(ChainstubError):
    """A mock rule failed validation; the rule set must not be persisted."""

    def __init__(self, rule_index: int, rule: Optional["MockRule"], reason: str) -> None:
        self.rule_index = rule_index
        self.rule = rule
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        if self.rule is None:
            return f"Rule #{self.rule_index + 1}: {self.reason}"
        return (
            f"Rule #{self.rule_index + 1} "
            f"(type={self.rule.type_name!r}, expression={self.rule.expression!r}): {self.reason}"
        )


class ResolutionError(ChainstubError):
    """A host lookup returned nothing while generating replacement statements."""


class SourceError(ChainstubError):
    """The source file could not be read or parsed."""


class RuleNotFoundError(ChainstubError):
    """No rule is stored for the requested type."""
