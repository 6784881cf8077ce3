"""Name Synthesizer: readable, collision-free names for intermediate mocks."""

import re
from typing import Optional

from chainstub.domain.constants import (
    DEFAULT_NAMING_STYLE,
    FALLBACK_NAME_WORDS,
    NAMING_STYLES,
    OPTIONAL_SUFFIX_WORD,
    OPTIONAL_WRAPPER,
)
from chainstub.domain.entities import CallLink, TypeRef

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class NameSynthesizer:
    """
    Names read as a narrative of the chain: `repository_find_user`,
    `repository_find_user_get_profile`, rather than `tmp1`, `tmp2`.

    `style` picks how words are joined: "snake" (`repo_find_user`) or
    "camel" (`repoFindUser`).
    """

    def __init__(self, style: str = DEFAULT_NAMING_STYLE) -> None:
        if style not in NAMING_STYLES:
            raise ValueError(f"Unknown naming style: {style!r} (expected one of {sorted(NAMING_STYLES)})")
        self.style = style

    def suggest(
        self,
        index: int,
        link: CallLink,
        type_ref: Optional[TypeRef],
        target_name: str,
        previous_mock_name: Optional[str],
        used_names: frozenset[str],
    ) -> tuple[str, frozenset[str]]:
        """Return the chosen name and the name table grown by it."""
        base = self._base_name(index, link, type_ref, target_name, previous_mock_name)
        name = self._disambiguate(base, target_name, used_names)
        return name, used_names | {name}

    def _base_name(
        self,
        index: int,
        link: CallLink,
        type_ref: Optional[TypeRef],
        target_name: str,
        previous_mock_name: Optional[str],
    ) -> str:
        method_name = link.method_name
        simple_type = type_ref.simple_name if type_ref is not None else ""

        if index == 0 and simple_type == OPTIONAL_WRAPPER:
            return self._join(target_name, OPTIONAL_SUFFIX_WORD)
        if index == 0:
            if link.qualifier_name and method_name.strip():
                return self._join(link.qualifier_name, method_name)
            return self._type_variable_name(simple_type)

        previous = previous_mock_name or self._fallback_name()
        if not method_name.strip():
            return previous
        return self._join(previous, method_name)

    @staticmethod
    def _disambiguate(base: str, target_name: str, used_names: frozenset[str]) -> str:
        if base != target_name and base not in used_names:
            return base
        suffix = 1
        while True:
            candidate = f"{base}{suffix}"
            if candidate != target_name and candidate not in used_names:
                return candidate
            suffix += 1

    def _join(self, head: str, word: str) -> str:
        if self.style == "camel":
            return head + "".join(piece[:1].upper() + piece[1:] for piece in word.split("_") if piece)
        tail = word.lstrip("_") or word
        return f"{head}_{tail}"

    def _type_variable_name(self, simple_type: str) -> str:
        if not simple_type:
            return self._fallback_name()
        if self.style == "camel":
            return simple_type[:1].lower() + simple_type[1:]
        return _CAMEL_BOUNDARY.sub("_", simple_type).lower()

    def _fallback_name(self) -> str:
        head, *rest = FALLBACK_NAME_WORDS
        name = head
        for word in rest:
            name = self._join(name, word)
        return name
