"""Unit tests for LibCSTEditorGateway and its source file sessions."""

import pytest

from chainstub.domain.entities import EditorContext, Position, Selection
from chainstub.domain.errors import ResolutionError, SourceError
from chainstub.infrastructure.gateways.astroid_gateway import AstroidGateway
from chainstub.infrastructure.gateways.libcst_editor_gateway import LibCSTEditorGateway

SOURCE = '''"""Order tests."""
from app import Repository


def test_orders(repository: Repository):
    total = 1
    name = repository.find_user(1, active=True).get_profile().get_name()
    count: int = repository.count()
    a = 1; b = repository.count()
    if total: c = repository.count()
    for x in repository.all():
        z = x.value()
'''


@pytest.fixture
def gateway():
    return LibCSTEditorGateway(AstroidGateway())


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "test_orders.py"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def open_at(gateway, path, line, column=None):
    context = EditorContext(file_path=str(path), caret=Position(line, column))
    session = gateway.open(context)
    return session, session.resolve_caret_or_selection(context)


class TestOpen:
    """open() reads and parses or raises SourceError."""

    def test_missing_file(self, gateway, tmp_path) -> None:
        with pytest.raises(SourceError, match="Cannot read"):
            gateway.open(EditorContext(file_path=str(tmp_path / "nope.py")))

    def test_syntax_error(self, gateway, tmp_path) -> None:
        path = tmp_path / "broken.py"
        path.write_text("def f(:\n", encoding="utf-8")
        with pytest.raises(SourceError, match="Cannot parse"):
            gateway.open(EditorContext(file_path=str(path)))


class TestCandidates:
    """Caret and selection resolution."""

    def test_caret_finds_statement_on_line(self, gateway, source_file) -> None:
        session, candidates = open_at(gateway, source_file, 7)
        assert len(candidates) == 1
        assert session.position_of(candidates[0]) == (7, 4)

    def test_caret_column_selects_statement_on_shared_line(self, gateway, source_file) -> None:
        session, candidates = open_at(gateway, source_file, 9, 12)
        assert session.position_of(candidates[0]) == (9, 11)

    def test_caret_outside_any_statement(self, gateway, source_file) -> None:
        _, candidates = open_at(gateway, source_file, 4)
        assert candidates == []

    def test_selection_collects_contained_assignments(self, gateway, source_file) -> None:
        context = EditorContext(
            file_path=str(source_file),
            caret=Position(6, 1),
            selection=Selection(Position(6, 1), Position(8, None)),
        )
        session = gateway.open(context)
        candidates = session.resolve_caret_or_selection(context)
        assert [session.position_of(c)[0] for c in candidates] == [6, 7, 8]

    def test_empty_selection_falls_back_to_caret(self, gateway, source_file) -> None:
        context = EditorContext(
            file_path=str(source_file),
            caret=Position(7, 5),
            selection=Selection(Position(7, 5), Position(7, 5)),
        )
        session = gateway.open(context)
        assert len(session.resolve_caret_or_selection(context)) == 1


class TestDeclarations:
    """declaration_of() and the call model."""

    def test_assignment_declaration(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 7)
        declaration = session.declaration_of(statement)

        assert declaration is not None
        assert declaration.target_name == "name"
        call = declaration.initializer
        assert session.method_name(call) == "get_name"
        assert session.argument_text(call) == "()"
        assert session.qualifier_text(call) == "repository.find_user(1, active=True).get_profile()"

        inner = session.qualifier_call(session.qualifier_call(call))
        assert session.method_name(inner) == "find_user"
        assert session.argument_text(inner) == "(1, active=True)"
        assert session.qualifier_text(inner) == "repository"
        assert session.qualifier_reference_name(inner) == "repository"
        assert session.qualifier_call(inner) is None
        assert session.type_of(inner) is None

    def test_annotated_declaration_carries_declared_type(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 8)
        declaration = session.declaration_of(statement)
        assert declaration.target_name == "count"
        assert declaration.declared_type.canonical_name == "int"

    def test_statements_sharing_a_line_are_not_declarations(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 9, 12)
        assert session.declaration_of(statement) is None

    def test_one_line_compound_body_is_not_a_declaration(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 10, 15)
        assert session.declaration_of(statement) is None

    def test_non_call_initializer(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 6)
        assert session.declaration_of(statement) is None

    def test_nested_block_statement(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 12)
        declaration = session.declaration_of(statement)
        assert declaration.target_name == "z"
        assert session.qualifier_reference_name(declaration.initializer) == "x"

    def test_existing_local_names_include_pending(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 7)
        names = session.existing_local_names(statement)
        assert {"repository", "total", "name", "count", "x", "z"} <= names

        session.insert_before(statement, "repository_find_user = mock()")
        assert "repository_find_user" in session.existing_local_names(statement)


class TestEdits:
    """Queued edits, preview and commit."""

    def test_replace_preview_and_commit(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 8)
        session.replace(statement, "count = 0\nwhen(repository).count().thenReturn(count)")
        session.ensure_import("mockito", "mock")
        session.ensure_import("mockito", "when")

        diff = session.preview()
        assert "-    count: int = repository.count()" in diff
        assert "+    count = 0" in diff
        assert "+    when(repository).count().thenReturn(count)" in diff
        assert "+from mockito import mock, when" in diff
        assert source_file.read_text(encoding="utf-8") == SOURCE

        assert session.commit() is True
        written = source_file.read_text(encoding="utf-8")
        assert written.splitlines()[2] == "from mockito import mock, when"
        assert "    count = 0\n    when(repository).count().thenReturn(count)\n    a = 1;" in written

    def test_commit_without_edits_leaves_file(self, gateway, source_file) -> None:
        session, _ = open_at(gateway, source_file, 7)
        assert session.commit() is False
        assert session.preview() == ""

    def test_invalid_statement_text_queues_nothing(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 8)
        with pytest.raises(ResolutionError):
            session.replace(statement, "count = 0\nwhen(repository.count(")
        assert session.has_edits() is False

    def test_compound_statement_text_is_rejected(self, gateway, source_file) -> None:
        session, (statement,) = open_at(gateway, source_file, 8)
        with pytest.raises(ResolutionError, match="simple statements"):
            session.insert_before(statement, "if x:\n    y = 1")
