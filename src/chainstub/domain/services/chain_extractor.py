"""Chain Extractor: turns a fluent call expression into an ordered list of call links."""

from typing import Optional

from chainstub.domain.entities import CallHandle, CallLink, Chain
from chainstub.domain.protocols import CodeModelProtocol


class ChainExtractor:
    """
    Walks a call's qualifier chain into inner-to-outer links.

    Leading calls to static methods (factories, module functions) are trimmed:
    only instance-method boundaries are worth a mock step.
    """

    def __init__(self, code_model: CodeModelProtocol) -> None:
        self._code_model = code_model

    def extract(self, root_call: CallHandle) -> Optional[Chain]:
        """Return a decomposable chain, or None when the call does not qualify."""
        calls = self.collect(root_call)
        if len(calls) < 2:
            return None
        chain = Chain(links=tuple(self.to_link(call) for call in calls))
        if not chain.is_decomposable():
            return None
        return chain

    def collect(self, root_call: CallHandle) -> list[CallHandle]:
        """Qualifier walk plus static-prefix stripping, without the validity checks."""
        discovered: list[CallHandle] = []
        current: Optional[CallHandle] = root_call
        while current is not None:
            discovered.append(current)
            current = self._code_model.qualifier_call(current)
        calls = discovered[::-1]

        start = 0
        while len(calls) - start > 1 and self._code_model.is_static_method(calls[start]):
            start += 1
        return calls[start:]

    def to_link(self, call: CallHandle) -> CallLink:
        model = self._code_model
        return CallLink(
            method_name=model.method_name(call),
            argument_text=model.argument_text(call),
            result_type=model.type_of(call),
            chained=model.qualifier_call(call) is not None,
            qualifier_text=model.qualifier_text(call),
            qualifier_name=model.qualifier_reference_name(call),
            text=model.call_text(call),
        )
