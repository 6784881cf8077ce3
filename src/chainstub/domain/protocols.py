from typing import Optional, Protocol

from chainstub.domain.entities import (
    CallHandle,
    Declaration,
    EditorContext,
    MockRule,
    StatementHandle,
    TypeRef,
)


class CodeModelProtocol(Protocol):
    """Read-only view of call expressions: structure, text and resolved types."""

    def qualifier_call(self, call: CallHandle) -> Optional[CallHandle]:
        """Return the direct qualifier if it is itself a method call (not a constructor)."""
        ...

    def qualifier_reference_name(self, call: CallHandle) -> Optional[str]:
        """Return the referenced name when the qualifier is a plain reference (`repo`, `self.repo`)."""
        ...

    def qualifier_text(self, call: CallHandle) -> str:
        """Return the source text of the qualifier, or "" when the call has none."""
        ...

    def method_name(self, call: CallHandle) -> str:
        ...

    def argument_text(self, call: CallHandle) -> str:
        """Return the parenthesised argument list exactly as written."""
        ...

    def call_text(self, call: CallHandle) -> str:
        ...

    def type_of(self, call: CallHandle) -> Optional[TypeRef]:
        ...

    def is_static_method(self, call: CallHandle) -> bool:
        ...

    def is_constructor_call(self, call: CallHandle) -> bool:
        """True when the call instantiates a class."""
        ...

    def is_mock_creation(self, call: CallHandle) -> bool:
        """True when the call is the mocking library's own `mock(...)`."""
        ...


class EditorSessionProtocol(CodeModelProtocol, Protocol):
    """One open source file; edits are collected and committed as one unit."""

    def resolve_caret_or_selection(self, context: EditorContext) -> list[StatementHandle]:
        ...

    def declaration_of(self, statement: StatementHandle) -> Optional[Declaration]:
        ...

    def position_of(self, statement: StatementHandle) -> tuple[int, int]:
        """Return (line, column) where the statement starts."""
        ...

    def existing_local_names(self, statement: StatementHandle) -> set[str]:
        ...

    def insert_before(self, anchor: StatementHandle, statement_text: str) -> list[StatementHandle]:
        """Queue newline-separated statements in front of anchor, all or nothing."""
        ...

    def delete(self, statement: StatementHandle) -> None:
        ...

    def replace(self, statement: StatementHandle, statement_text: str) -> None:
        ...

    def ensure_import(self, qualified_name: str, member: Optional[str] = None) -> None:
        ...

    def preview(self) -> str:
        """Return a unified diff of the pending edits."""
        ...

    def commit(self) -> bool:
        """Write all pending edits at once. Returns True if the file changed."""
        ...


class EditorGatewayProtocol(Protocol):
    def open(self, context: EditorContext) -> EditorSessionProtocol:
        ...


class RuleSettingsProtocol(Protocol):
    """Persistence for the ordered mock rule list."""

    def load(self) -> list[MockRule]:
        ...

    def save(self, rules: list[MockRule]) -> None:
        ...


class MockExpressionResolverProtocol(Protocol):
    def resolve_expression(self, type_name: str) -> Optional[str]:
        ...


class TelemetryPort(Protocol):
    """Protocol for user-facing progress lines."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
