"""LibCST based Editor Gateway: read a source file, collect statement edits, write once."""

import difflib
from collections import defaultdict
from typing import Optional

import astroid  # type: ignore[import-untyped]
import libcst as cst

from chainstub.domain.entities import Declaration, EditorContext, Position, Selection, TypeRef
from chainstub.domain.errors import ResolutionError, SourceError
from chainstub.domain.protocols import EditorGatewayProtocol, EditorSessionProtocol
from chainstub.infrastructure.gateways.astroid_gateway import AstroidGateway
from chainstub.infrastructure.gateways.transformers import (
    EnsureImportTransformer,
    LineEdit,
    ReplaceStatementsTransformer,
)

_DECLARATIONS = (astroid.nodes.Assign, astroid.nodes.AnnAssign)


class LibCSTEditorGateway(EditorGatewayProtocol):
    """Opens editor sessions on Python source files."""

    def __init__(self, astroid_gateway: AstroidGateway) -> None:
        self.astroid_gateway = astroid_gateway

    def open(self, context: EditorContext) -> "SourceFileSession":
        try:
            with open(context.file_path, encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceError(f"Cannot read {context.file_path}: {e}") from e
        self.astroid_gateway.clear_inference_cache()
        try:
            module = self.astroid_gateway.parse_source(source, context.file_path)
            cst.parse_module(source)
        except (astroid.exceptions.AstroidSyntaxError, cst.ParserSyntaxError) as e:
            raise SourceError(f"Cannot parse {context.file_path}: {e}") from e
        return SourceFileSession(context.file_path, source, module, self.astroid_gateway)


class SourceFileSession(EditorSessionProtocol):
    """
    One parsed file. Statement handles are astroid statement nodes; edits are
    keyed by the line a statement starts on and rendered by libcst on
    preview/commit, so untouched code keeps its exact formatting.
    """

    def __init__(
        self,
        file_path: str,
        source: str,
        module: astroid.nodes.Module,
        gateway: AstroidGateway,
    ) -> None:
        self.file_path = file_path
        self.source = source
        self.module = module
        self._gateway = gateway
        self._lines: list[bytes] = source.encode("utf-8").splitlines(keepends=True)
        self._edits: dict[int, LineEdit] = {}
        self._imports: dict[str, list[str]] = {}
        self._pending_names: dict[int, set[str]] = defaultdict(set)
        self._statements = self._simple_statements()
        self._shared_lines = self._lines_with_several_statements()

    # -- CodeModelProtocol ---------------------------------------------------

    def qualifier_call(self, call: astroid.nodes.Call) -> Optional[astroid.nodes.Call]:
        func = call.func
        if not isinstance(func, astroid.nodes.Attribute):
            return None
        receiver = func.expr
        if isinstance(receiver, astroid.nodes.Call) and not self.is_constructor_call(receiver):
            return receiver
        return None

    def qualifier_reference_name(self, call: astroid.nodes.Call) -> Optional[str]:
        func = call.func
        if not isinstance(func, astroid.nodes.Attribute):
            return None
        return self._gateway.reference_name(func.expr)

    def qualifier_text(self, call: astroid.nodes.Call) -> str:
        func = call.func
        if not isinstance(func, astroid.nodes.Attribute):
            return ""
        return self.text_of(func.expr)

    def method_name(self, call: astroid.nodes.Call) -> str:
        func = call.func
        if isinstance(func, astroid.nodes.Attribute):
            return str(func.attrname)
        if isinstance(func, astroid.nodes.Name):
            return str(func.name)
        return self.text_of(func)

    def argument_text(self, call: astroid.nodes.Call) -> str:
        func = call.func
        return self._slice(func.end_lineno, func.end_col_offset, call.end_lineno, call.end_col_offset)

    def call_text(self, call: astroid.nodes.Call) -> str:
        return self.text_of(call)

    def type_of(self, call: astroid.nodes.Call) -> Optional[TypeRef]:
        return self._gateway.type_of(call)

    def is_static_method(self, call: astroid.nodes.Call) -> bool:
        return self._gateway.is_static_method(call)

    def is_constructor_call(self, call: astroid.nodes.Call) -> bool:
        return self._gateway.is_constructor_call(call)

    def is_mock_creation(self, call: astroid.nodes.Call) -> bool:
        return self._gateway.is_mock_creation(call)

    # -- Candidates and declarations ------------------------------------------

    def resolve_caret_or_selection(self, context: EditorContext) -> list[astroid.nodes.NodeNG]:
        """Assignments fully inside a selection, else the statement under the caret."""
        if context.has_selection() and context.selection is not None:
            return self._statements_in(context.selection)
        if context.caret is None:
            return []
        statement = self._statement_at(context.caret)
        return [statement] if statement is not None else []

    def declaration_of(self, statement: astroid.nodes.NodeNG) -> Optional[Declaration]:
        if statement.lineno in self._shared_lines or not self._starts_line(statement):
            return None
        if isinstance(statement, astroid.nodes.Assign):
            if len(statement.targets) != 1 or not isinstance(statement.targets[0], astroid.nodes.AssignName):
                return None
            target, declared_type = statement.targets[0], None
        elif isinstance(statement, astroid.nodes.AnnAssign):
            if statement.value is None or not isinstance(statement.target, astroid.nodes.AssignName):
                return None
            target, declared_type = statement.target, self._gateway.annotation_type(statement.annotation)
        else:
            return None
        if not isinstance(statement.value, astroid.nodes.Call):
            return None
        return Declaration(
            statement=statement,
            target_name=str(target.name),
            initializer=statement.value,
            declared_type=declared_type,
        )

    def position_of(self, statement: astroid.nodes.NodeNG) -> tuple[int, int]:
        return (statement.lineno, statement.col_offset)

    def existing_local_names(self, statement: astroid.nodes.NodeNG) -> set[str]:
        scope = statement.scope()
        return set(scope.locals) | self._pending_names[id(scope)]

    # -- Edits ---------------------------------------------------------------

    def insert_before(self, anchor: astroid.nodes.NodeNG, statement_text: str) -> list[str]:
        """
        Queue one or more newline-separated simple statements in front of anchor.
        Nothing is queued unless all of them parse.
        """
        try:
            parsed = cst.parse_module(statement_text)
        except cst.ParserSyntaxError as e:
            raise ResolutionError(f"Generated statement is not valid Python: {statement_text!r}") from e
        if not parsed.body or not all(isinstance(s, cst.SimpleStatementLine) for s in parsed.body):
            raise ResolutionError(f"Generated statements must be simple statements: {statement_text!r}")

        texts = [parsed.code_for_node(s).strip() for s in parsed.body]
        self._edit_for(anchor).inserted.extend(texts)
        names = self._pending_names[id(anchor.scope())]
        for statement in parsed.body:
            names.update(self._assigned_names(statement))
        return texts

    def delete(self, statement: astroid.nodes.NodeNG) -> None:
        self._edit_for(statement).deleted = True

    def replace(self, statement: astroid.nodes.NodeNG, statement_text: str) -> None:
        self.insert_before(statement, statement_text)
        self.delete(statement)

    def ensure_import(self, qualified_name: str, member: Optional[str] = None) -> None:
        members = self._imports.setdefault(qualified_name, [])
        if member is not None and member not in members:
            members.append(member)

    def has_edits(self) -> bool:
        return bool(self._edits)

    def render(self) -> str:
        """Source text with every queued edit applied."""
        if not self._edits:
            return self.source
        module = cst.parse_module(self.source)
        replacer = ReplaceStatementsTransformer(self._edits)
        module = cst.MetadataWrapper(module).visit(replacer)
        missed = set(self._edits) - replacer.applied
        if missed:
            raise ResolutionError(f"No statement found on line(s) {sorted(missed)} of {self.file_path}")
        for module_name, members in self._imports.items():
            module = module.visit(EnsureImportTransformer({"module": module_name, "imports": members}))
        return module.code

    def preview(self) -> str:
        new_code = self.render()
        diff = difflib.unified_diff(
            self.source.splitlines(keepends=True),
            new_code.splitlines(keepends=True),
            fromfile=f"a/{self.file_path}",
            tofile=f"b/{self.file_path}",
        )
        return "".join(diff)

    def commit(self) -> bool:
        new_code = self.render()
        if new_code == self.source:
            return False
        try:
            with open(self.file_path, "w", encoding="utf-8") as f:
                f.write(new_code)
        except OSError as e:
            raise SourceError(f"Cannot write {self.file_path}: {e}") from e
        self.source = new_code
        self._edits.clear()
        self._imports.clear()
        return True

    # -- Helpers -------------------------------------------------------------

    def text_of(self, node: astroid.nodes.NodeNG) -> str:
        return self._slice(node.lineno, node.col_offset, node.end_lineno, node.end_col_offset)

    def _slice(self, start_line: int, start_col: int, end_line: int, end_col: int) -> str:
        """Source between two (1-based line, byte column) positions."""
        if start_line == end_line:
            return self._lines[start_line - 1][start_col:end_col].decode("utf-8")
        parts = [self._lines[start_line - 1][start_col:]]
        parts.extend(self._lines[start_line:end_line - 1])
        parts.append(self._lines[end_line - 1][:end_col])
        return b"".join(parts).decode("utf-8")

    def _starts_line(self, statement: astroid.nodes.NodeNG) -> bool:
        return not self._lines[statement.lineno - 1][: statement.col_offset].strip()

    def _edit_for(self, statement: astroid.nodes.NodeNG) -> LineEdit:
        return self._edits.setdefault(statement.lineno, LineEdit())

    def _simple_statements(self) -> list[astroid.nodes.NodeNG]:
        found: list[astroid.nodes.NodeNG] = []
        stack: list[astroid.nodes.NodeNG] = [self.module]
        while stack:
            node = stack.pop()
            for child in node.get_children():
                if self._is_compound(child):
                    stack.append(child)
                elif child.is_statement:
                    found.append(child)
        return sorted(found, key=lambda n: (n.lineno, n.col_offset))

    @staticmethod
    def _is_compound(node: astroid.nodes.NodeNG) -> bool:
        return isinstance(
            node,
            (
                astroid.nodes.FunctionDef,
                astroid.nodes.ClassDef,
                astroid.nodes.If,
                astroid.nodes.For,
                astroid.nodes.While,
                astroid.nodes.With,
                astroid.nodes.Try,
                astroid.nodes.TryStar,
                astroid.nodes.Match,
                astroid.nodes.ExceptHandler,
                astroid.nodes.MatchCase,
            ),
        )

    def _lines_with_several_statements(self) -> set[int]:
        starts: dict[int, int] = defaultdict(int)
        for statement in self._statements:
            for line in range(statement.lineno, (statement.end_lineno or statement.lineno) + 1):
                starts[line] += 1
        return {line for line, count in starts.items() if count > 1}

    def _statement_at(self, caret: Position) -> Optional[astroid.nodes.NodeNG]:
        column = self._byte_column(caret.line, caret.column) if caret.column is not None else None
        for statement in self._statements:
            if not statement.lineno <= caret.line <= statement.end_lineno:
                continue
            if column is None:
                return statement
            start = (statement.lineno, statement.col_offset)
            end = (statement.end_lineno, statement.end_col_offset)
            if start <= (caret.line, column) <= end:
                return statement
        return None

    def _statements_in(self, selection: Selection) -> list[astroid.nodes.NodeNG]:
        start = (selection.start.line, self._byte_column(selection.start.line, selection.start.column or 1))
        if selection.end.column is None:
            end_line_length = len(self._lines[selection.end.line - 1]) if selection.end.line <= len(self._lines) else 0
            end = (selection.end.line, end_line_length)
        else:
            end = (selection.end.line, self._byte_column(selection.end.line, selection.end.column))
        return [
            statement
            for statement in self._statements
            if isinstance(statement, _DECLARATIONS)
            and start <= (statement.lineno, statement.col_offset)
            and (statement.end_lineno, statement.end_col_offset) <= end
        ]

    def _byte_column(self, line: int, column: int) -> int:
        """1-based character column to 0-based byte offset."""
        if line < 1 or line > len(self._lines):
            return max(column - 1, 0)
        text = self._lines[line - 1].decode("utf-8")
        return len(text[: max(column - 1, 0)].encode("utf-8"))

    @staticmethod
    def _assigned_names(statement: cst.SimpleStatementLine) -> set[str]:
        names: set[str] = set()
        for small in statement.body:
            if isinstance(small, cst.Assign):
                for target in small.targets:
                    if isinstance(target.target, cst.Name):
                        names.add(target.target.value)
            elif isinstance(small, cst.AnnAssign) and isinstance(small.target, cst.Name):
                names.add(small.target.value)
        return names
