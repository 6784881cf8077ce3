"""Use Case: Replace declarations with mock scaffolding in place."""

import re
from abc import ABC, abstractmethod
from typing import Optional

from chainstub.domain.constants import (
    CREATE_MOCK,
    DEFINE_RETURN,
    FALLBACK_MOCK_EXPRESSION,
    MOCKING_MODULE,
    UUID_MODULE,
)
from chainstub.domain.entities import Declaration, EditorContext, StatementHandle, TransformOutcome
from chainstub.domain.errors import ResolutionError
from chainstub.domain.protocols import (
    EditorGatewayProtocol,
    EditorSessionProtocol,
    MockExpressionResolverProtocol,
    TelemetryPort,
)
from chainstub.domain.services.chain_extractor import ChainExtractor
from chainstub.domain.services.name_synthesizer import NameSynthesizer
from chainstub.domain.services.scaffold_generator import ScaffoldGenerator

_UUID_REFERENCE = re.compile(rf"\b{UUID_MODULE}\.")


class TransformStatementsUseCase(ABC):
    """
    Shared driver: find the candidate statements for the caret or selection,
    and when every one of them is transformable, rewrite them bottom-up in a
    single edit session.
    """

    title: str = ""

    def __init__(
        self,
        editor_gateway: EditorGatewayProtocol,
        rules: MockExpressionResolverProtocol,
        names: NameSynthesizer,
        telemetry: TelemetryPort,
        fallback_expression: str = FALLBACK_MOCK_EXPRESSION,
    ) -> None:
        self.editor_gateway = editor_gateway
        self.rules = rules
        self.names = names
        self.telemetry = telemetry
        self.fallback_expression = fallback_expression

    def is_available(self, context: EditorContext) -> bool:
        session = self.editor_gateway.open(context)
        return self._is_available_in(session, context)

    def execute(self, context: EditorContext, dry_run: bool = False) -> TransformOutcome:
        """Apply the transformation; with dry_run the file is left untouched and a diff is returned."""
        session = self.editor_gateway.open(context)
        if not self._is_available_in(session, context):
            self.telemetry.warning(f"{self.title}: not applicable at the given position")
            return TransformOutcome()

        candidates = sorted(
            session.resolve_caret_or_selection(context),
            key=session.position_of,
            reverse=True,
        )
        applied = 0
        skipped: list[str] = []
        uses_uuid = False
        for statement in candidates:
            declaration = session.declaration_of(statement)
            if declaration is None:
                continue
            line = session.position_of(statement)[0]
            try:
                statements = self.replacement_statements(session, declaration)
                session.replace(statement, "\n".join(statements))
            except ResolutionError as e:
                skipped.append(f"line {line}: {e}")
                self.telemetry.warning(f"Skipping {declaration.target_name!r} on line {line}: {e}")
                continue
            applied += 1
            uses_uuid = uses_uuid or any(_UUID_REFERENCE.search(text) for text in statements)
            self.telemetry.step(
                f"{self.title}: {declaration.target_name!r} on line {line} -> {len(statements)} statements"
            )

        if not applied:
            return TransformOutcome(applied=0, skipped=skipped)

        session.ensure_import(MOCKING_MODULE, CREATE_MOCK)
        session.ensure_import(MOCKING_MODULE, DEFINE_RETURN)
        if uses_uuid:
            session.ensure_import(UUID_MODULE)

        if dry_run:
            return TransformOutcome(applied=applied, skipped=skipped, preview=session.preview())
        modified = session.commit()
        return TransformOutcome(applied=applied, skipped=skipped, modified=modified)

    @abstractmethod
    def is_transformable(self, session: EditorSessionProtocol, statement: StatementHandle) -> bool:
        """True when the statement can be rewritten by this action."""

    @abstractmethod
    def replacement_statements(
        self, session: EditorSessionProtocol, declaration: Declaration
    ) -> list[str]:
        """Statements that take the place of the declaration, in order."""

    def _is_available_in(self, session: EditorSessionProtocol, context: EditorContext) -> bool:
        candidates = session.resolve_caret_or_selection(context)
        if not candidates:
            return False
        return all(self.is_transformable(session, statement) for statement in candidates)

    def _generator(self) -> ScaffoldGenerator:
        return ScaffoldGenerator(self.rules, self.names, self.fallback_expression)

    @staticmethod
    def _stubbable_declaration(
        session: EditorSessionProtocol, statement: StatementHandle
    ) -> Optional[Declaration]:
        declaration = session.declaration_of(statement)
        if declaration is None or session.is_mock_creation(declaration.initializer):
            return None
        return declaration

    @staticmethod
    def _used_names(session: EditorSessionProtocol, declaration: Declaration) -> frozenset[str]:
        return frozenset(session.existing_local_names(declaration.statement))


class DecomposeChainUseCase(TransformStatementsUseCase):
    """Replace `x = a.b().c().d()` with one mock and one stub per call of the chain."""

    title = "Mock chain"

    def is_transformable(self, session: EditorSessionProtocol, statement: StatementHandle) -> bool:
        declaration = self._stubbable_declaration(session, statement)
        if declaration is None:
            return False
        extractor = ChainExtractor(session)
        calls = extractor.collect(declaration.initializer)
        if len(calls) == 1:
            return bool(session.qualifier_text(calls[0]))
        return extractor.extract(declaration.initializer) is not None

    def replacement_statements(
        self, session: EditorSessionProtocol, declaration: Declaration
    ) -> list[str]:
        extractor = ChainExtractor(session)
        generator = self._generator()
        target_type = session.type_of(declaration.initializer) or declaration.declared_type

        calls = extractor.collect(declaration.initializer)
        if len(calls) == 1:
            step = generator.single_statement(
                declaration.target_name, target_type, extractor.to_link(calls[0])
            )
            return step.statements()

        chain = extractor.extract(declaration.initializer)
        if chain is None:
            raise ResolutionError(f"Cannot resolve the call chain assigned to {declaration.target_name!r}")
        steps = generator.generate(
            chain,
            declaration.target_name,
            target_type,
            self._used_names(session, declaration),
        )
        return generator.statements(steps)


class StubDeclarationUseCase(TransformStatementsUseCase):
    """Replace `x = a.b()` with `x = <mock>` plus one stub of the original call."""

    title = "Mock declaration"

    def is_transformable(self, session: EditorSessionProtocol, statement: StatementHandle) -> bool:
        declaration = self._stubbable_declaration(session, statement)
        if declaration is None:
            return False
        return bool(session.qualifier_text(declaration.initializer))

    def replacement_statements(
        self, session: EditorSessionProtocol, declaration: Declaration
    ) -> list[str]:
        extractor = ChainExtractor(session)
        target_type = session.type_of(declaration.initializer) or declaration.declared_type
        step = self._generator().single_statement(
            declaration.target_name,
            target_type,
            extractor.to_link(declaration.initializer),
        )
        return step.statements()
