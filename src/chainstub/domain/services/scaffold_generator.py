"""Scaffold Generator: declaration/stub statement pairs that reproduce a chain's value."""

from typing import Optional

from chainstub.domain.constants import FALLBACK_MOCK_EXPRESSION
from chainstub.domain.entities import (
    CallLink,
    Chain,
    MockDeclaration,
    ScaffoldStep,
    StubBinding,
    TypeRef,
)
from chainstub.domain.errors import ResolutionError
from chainstub.domain.protocols import MockExpressionResolverProtocol
from chainstub.domain.services.name_synthesizer import NameSynthesizer


class ScaffoldGenerator:
    """
    Emits one ScaffoldStep per link, inner to outer, so that every stub's
    qualifier mock is declared before it is referenced. The last step declares
    the original target variable.
    """

    def __init__(
        self,
        rules: MockExpressionResolverProtocol,
        names: NameSynthesizer,
        fallback_expression: str = FALLBACK_MOCK_EXPRESSION,
    ) -> None:
        self._rules = rules
        self._names = names
        self._fallback_expression = fallback_expression

    def generate(
        self,
        chain: Chain,
        target_name: str,
        target_type: Optional[TypeRef],
        used_names: frozenset[str] = frozenset(),
    ) -> list[ScaffoldStep]:
        if len(chain) < 2:
            raise ResolutionError(f"Chain for {target_name!r} has fewer than two calls")

        steps: list[ScaffoldStep] = []
        names = used_names | {target_name}
        previous_mock_name: Optional[str] = None

        for index, link in enumerate(chain.links[:-1]):
            if link.result_type is None:
                raise ResolutionError(
                    f"No type information for {link.text or link.method_name!r} in chain of {target_name!r}"
                )
            mock_name, names = self._names.suggest(
                index, link, link.result_type, target_name, previous_mock_name, names
            )
            steps.append(
                ScaffoldStep(
                    declaration=MockDeclaration(mock_name, self.mock_expression(link.result_type)),
                    stub=self._stub(link, previous_mock_name, mock_name),
                )
            )
            previous_mock_name = mock_name

        steps.append(
            ScaffoldStep(
                declaration=MockDeclaration(target_name, self.mock_expression(target_type)),
                stub=self._stub(chain.last, previous_mock_name, target_name),
            )
        )
        return steps

    def single_statement(
        self, target_name: str, target_type: Optional[TypeRef], link: CallLink
    ) -> ScaffoldStep:
        """Declare the target and stub the original call to return it, with no intermediate mocks."""
        if not link.qualifier_text:
            raise ResolutionError(f"Call {link.text!r} has no qualifier to stub")
        return ScaffoldStep(
            declaration=MockDeclaration(target_name, self.mock_expression(target_type)),
            stub=self._stub(link, None, target_name),
        )

    def mock_expression(self, type_ref: Optional[TypeRef]) -> str:
        if type_ref is not None:
            configured = self._rules.resolve_expression(type_ref.canonical_name)
            if configured is not None:
                return configured
        return self._fallback_expression

    @staticmethod
    def statements(steps: list[ScaffoldStep]) -> list[str]:
        return [text for step in steps for text in step.statements()]

    @staticmethod
    def _stub(link: CallLink, previous_mock_name: Optional[str], result_name: str) -> StubBinding:
        qualifier = previous_mock_name if previous_mock_name is not None else link.qualifier_text
        if not qualifier:
            raise ResolutionError(f"Call {link.text or link.method_name!r} has no qualifier to stub")
        return StubBinding(
            qualifier=qualifier,
            method_name=link.method_name,
            argument_text=link.argument_text,
            result_name=result_name,
        )
