from dataclasses import dataclass, field
from typing import Optional

from chainstub.domain.constants import DEFINE_RETURN, THEN_RETURN

# Opaque handles owned by the host code model; the domain never looks inside them.
CallHandle = object
StatementHandle = object


@dataclass(frozen=True)
class TypeRef:
    """A resolved static type as the host reports it."""

    canonical_name: str
    simple_name: str

    @classmethod
    def from_qname(cls, qname: str) -> "TypeRef":
        """Build a TypeRef from a dotted name; the simple name is the last segment."""
        return cls(canonical_name=qname, simple_name=qname.rsplit(".", 1)[-1])


@dataclass(frozen=True)
class CallLink:
    """
    One call of a fluent chain.

    `chained` is True when the direct qualifier is itself a call; otherwise the
    qualifier is a root reference (a name, an attribute, a constructor call) or
    absent. `qualifier_name` is only set for plain references.
    """

    method_name: str
    argument_text: str
    result_type: Optional[TypeRef]
    chained: bool
    qualifier_text: str
    qualifier_name: Optional[str] = None
    text: str = ""


@dataclass(frozen=True)
class Chain:
    """Ordered call links, index 0 innermost (evaluated first)."""

    links: tuple[CallLink, ...]

    def __len__(self) -> int:
        return len(self.links)

    def __getitem__(self, index: int) -> CallLink:
        return self.links[index]

    @property
    def last(self) -> CallLink:
        return self.links[-1]

    def is_decomposable(self) -> bool:
        """At least two links, and every link but the last has a known result type."""
        if len(self.links) < 2:
            return False
        return all(link.result_type is not None for link in self.links[:-1])


@dataclass(frozen=True)
class MockRule:
    """Maps a type identifier to the expression that stands in for a mocked value."""

    type_name: str
    expression: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"type": self.type_name, "expression": self.expression}


@dataclass(frozen=True)
class MockDeclaration:
    """`name = expression`"""

    name: str
    expression: str

    def render(self) -> str:
        return f"{self.name} = {self.expression}"


@dataclass(frozen=True)
class StubBinding:
    """`when(qualifier).method(args).thenReturn(result)`"""

    qualifier: str
    method_name: str
    argument_text: str
    result_name: str

    def render(self) -> str:
        return (
            f"{DEFINE_RETURN}({self.qualifier}).{self.method_name}{self.argument_text}"
            f".{THEN_RETURN}({self.result_name})"
        )


@dataclass(frozen=True)
class ScaffoldStep:
    """A declaration and the stub that returns the declared value, in that order."""

    declaration: MockDeclaration
    stub: StubBinding

    def statements(self) -> list[str]:
        return [self.declaration.render(), self.stub.render()]


@dataclass(frozen=True)
class Declaration:
    """A statement that declares exactly one named local variable from an initializer."""

    statement: StatementHandle
    target_name: str
    initializer: CallHandle
    declared_type: Optional[TypeRef] = None


@dataclass(frozen=True)
class Position:
    """Line is 1-based; column is 1-based and optional (None means the whole line)."""

    line: int
    column: Optional[int] = None


@dataclass(frozen=True)
class Selection:
    start: Position
    end: Position

    def is_empty(self) -> bool:
        return self.start == self.end


@dataclass(frozen=True)
class EditorContext:
    """What the editor reports when an action is triggered."""

    file_path: str
    caret: Optional[Position] = None
    selection: Optional[Selection] = None

    def has_selection(self) -> bool:
        return self.selection is not None and not self.selection.is_empty()


@dataclass(frozen=True)
class TransformOutcome:
    """Result of one action invocation."""

    applied: int = 0
    skipped: list[str] = field(default_factory=list)
    modified: bool = False
    preview: str = ""

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for reporting."""
        return {
            "applied": self.applied,
            "skipped": list(self.skipped),
            "modified": self.modified,
        }
