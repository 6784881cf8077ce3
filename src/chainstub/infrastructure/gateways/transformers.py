"""LibCST Transformers for scaffold edits."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

import libcst as cst
from libcst.metadata import PositionProvider


@dataclass
class LineEdit:
    """Statements to insert in front of the statement starting on a line, and whether to drop it."""

    inserted: list[str] = field(default_factory=list)
    deleted: bool = False


class ReplaceStatementsTransformer(cst.CSTTransformer):
    """
    Applies LineEdits keyed by the 1-based line a simple statement starts on.
    Comments and blank lines above an edited statement stay above the first
    statement that takes its place.
    """

    METADATA_DEPENDENCIES = (PositionProvider,)

    def __init__(self, edits: dict[int, LineEdit]) -> None:
        super().__init__()
        self.edits = edits
        self.applied: set[int] = set()

    def leave_SimpleStatementLine(
        self, original_node: cst.SimpleStatementLine, updated_node: cst.SimpleStatementLine
    ) -> Union[cst.BaseStatement, cst.FlattenSentinel[cst.BaseStatement], cst.RemovalSentinel]:
        line = self.get_metadata(PositionProvider, original_node).start.line
        edit = self.edits.get(line)
        if edit is None:
            return updated_node
        self.applied.add(line)

        new_nodes: list[cst.BaseStatement] = [cst.parse_statement(text) for text in edit.inserted]
        if not edit.deleted:
            new_nodes.append(updated_node.with_changes(leading_lines=()))
        if not new_nodes:
            return cst.RemovalSentinel.REMOVE
        new_nodes[0] = new_nodes[0].with_changes(leading_lines=updated_node.leading_lines)
        return cst.FlattenSentinel(new_nodes)


class EnsureImportTransformer(cst.CSTTransformer):
    """
    Transformer to make names importable at module level.

    context: {"module": "a.b", "imports": ["x", "y"]} yields `from a.b import x, y`
    for whichever members are missing; with no members it yields `import a.b`.
    """

    def __init__(self, context: dict) -> None:
        super().__init__()
        self.module: str = context["module"]
        self.imports: list[str] = list(context.get("imports", []))
        self.added = False

    def leave_Module(self, original_node: cst.Module, updated_node: cst.Module) -> cst.Module:
        body = list(updated_node.body)
        missing = self._missing(body)
        if missing is None:
            return updated_node

        if self.imports:
            import_stmt: cst.BaseSmallStatement = cst.ImportFrom(
                module=self._module_expr(),
                names=[cst.ImportAlias(name=cst.Name(n)) for n in missing],
            )
        else:
            import_stmt = cst.Import(names=[cst.ImportAlias(name=self._module_expr())])

        body.insert(self._insert_index(body), cst.SimpleStatementLine(body=[import_stmt]))
        self.added = True
        return updated_node.with_changes(body=body)

    def _missing(self, body: Sequence[cst.BaseStatement]) -> Optional[list[str]]:
        """Members still to import; None when nothing is missing."""
        found: set[str] = set()
        for stmt in body:
            if not isinstance(stmt, cst.SimpleStatementLine):
                continue
            for small in stmt.body:
                if isinstance(small, cst.ImportFrom) and not small.relative and self._names_module(small.module):
                    if isinstance(small.names, cst.ImportStar):
                        return None
                    for alias in small.names:
                        if alias.asname is None and isinstance(alias.name, cst.Name):
                            found.add(alias.name.value)
                elif isinstance(small, cst.Import) and not self.imports:
                    for alias in small.names:
                        if alias.asname is None and self._names_module(alias.name):
                            return None
        if not self.imports:
            return []
        missing = [name for name in self.imports if name not in found]
        return missing or None

    def _names_module(self, node: Optional[cst.BaseExpression]) -> bool:
        if node is None:
            return False
        return cst.Module(body=[]).code_for_node(node) == self.module

    def _module_expr(self) -> Union[cst.Name, cst.Attribute]:
        # Support dotted module paths like "a.b.c"
        parts = self.module.split(".")
        module_expr: Union[cst.Name, cst.Attribute] = cst.Name(parts[0])
        for part in parts[1:]:
            module_expr = cst.Attribute(value=module_expr, attr=cst.Name(part))
        return module_expr

    @staticmethod
    def _insert_index(body: Sequence[cst.BaseStatement]) -> int:
        """After the last top-level import; otherwise after a module docstring."""
        insert_idx = 0
        for i, stmt in enumerate(body):
            if isinstance(stmt, cst.SimpleStatementLine) and any(
                isinstance(small, (cst.Import, cst.ImportFrom)) for small in stmt.body
            ):
                insert_idx = i + 1
        if insert_idx == 0 and body:
            first = body[0]
            if (
                isinstance(first, cst.SimpleStatementLine)
                and len(first.body) == 1
                and isinstance(first.body[0], cst.Expr)
                and isinstance(first.body[0].value, (cst.SimpleString, cst.ConcatenatedString))
            ):
                insert_idx = 1
        return insert_idx
