"""Unit tests for NameSynthesizer."""

import pytest

from chainstub.domain.entities import CallLink, TypeRef
from chainstub.domain.services.name_synthesizer import NameSynthesizer

USER = TypeRef("app.models.User", "User")
OPTIONAL = TypeRef("typing.Optional", "Optional")
HTTP_CLIENT = TypeRef("app.HTTPClient", "HTTPClient")


def link(method: str, qualifier_name=None, chained=False) -> CallLink:
    return CallLink(
        method_name=method,
        argument_text="()",
        result_type=None,
        chained=chained,
        qualifier_text=qualifier_name or "",
        qualifier_name=qualifier_name,
    )


class TestCamelStyle:
    """camel style reproduces the classic names."""

    def setup_method(self) -> None:
        self.names = NameSynthesizer("camel")

    def test_first_link_with_reference_qualifier(self) -> None:
        name, used = self.names.suggest(0, link("findUser", "repository"), USER, "name", None, frozenset())
        assert name == "repositoryFindUser"
        assert used == frozenset({"repositoryFindUser"})

    def test_snake_method_names_are_camel_cased(self) -> None:
        name, _ = self.names.suggest(0, link("find_user", "repository"), USER, "name", None, frozenset())
        assert name == "repositoryFindUser"
        name, _ = self.names.suggest(1, link("get__profile_", chained=True), USER, "name", name, frozenset())
        assert name == "repositoryFindUserGetProfile"

    def test_first_link_optional_result(self) -> None:
        name, _ = self.names.suggest(0, link("findUser", "repository"), OPTIONAL, "user", None, frozenset())
        assert name == "userOptional"

    def test_first_link_without_reference_uses_type_name(self) -> None:
        name, _ = self.names.suggest(0, link("getUser"), USER, "name", None, frozenset())
        assert name == "user"

    def test_first_link_without_reference_or_type(self) -> None:
        name, _ = self.names.suggest(0, link("getUser"), None, "name", None, frozenset())
        assert name == "mockedValue"

    def test_later_link_extends_previous_name(self) -> None:
        name, _ = self.names.suggest(1, link("getProfile", chained=True), USER, "name", "userGetProfile", frozenset())
        assert name == "userGetProfileGetProfile"
        name, _ = self.names.suggest(1, link("getProfile", chained=True), USER, "name", "user", frozenset())
        assert name == "userGetProfile"

    def test_later_link_with_blank_method_reuses_previous(self) -> None:
        name, _ = self.names.suggest(1, link(" ", chained=True), USER, "name", "user", frozenset({"x"}))
        assert name == "user"

    def test_collision_with_used_names_and_target(self) -> None:
        used = frozenset({"repositoryFindUser", "repositoryFindUser1"})
        name, _ = self.names.suggest(0, link("findUser", "repository"), USER, "x", None, used)
        assert name == "repositoryFindUser2"

        name, _ = self.names.suggest(0, link("getUser"), USER, "user", None, frozenset())
        assert name == "user1"


class TestSnakeStyle:
    """snake style joins words with underscores."""

    def setup_method(self) -> None:
        self.names = NameSynthesizer()

    def test_default_style_is_snake(self) -> None:
        assert self.names.style == "snake"

    def test_joins_with_underscore(self) -> None:
        name, _ = self.names.suggest(0, link("find_user", "repository"), USER, "name", None, frozenset())
        assert name == "repository_find_user"
        name, _ = self.names.suggest(1, link("get_profile", chained=True), USER, "name", name, frozenset())
        assert name == "repository_find_user_get_profile"

    def test_optional_and_fallback(self) -> None:
        name, _ = self.names.suggest(0, link("find"), OPTIONAL, "user", None, frozenset())
        assert name == "user_optional"
        name, _ = self.names.suggest(0, link("find"), None, "user", None, frozenset())
        assert name == "mocked_value"

    def test_type_name_is_snake_cased(self) -> None:
        name, _ = self.names.suggest(0, link("client"), HTTP_CLIENT, "x", None, frozenset())
        assert name == "http_client"

    def test_private_method_does_not_double_underscores(self) -> None:
        name, _ = self.names.suggest(0, link("_load", "repo"), USER, "x", None, frozenset())
        assert name == "repo_load"


def test_names_are_distinct_and_avoid_existing_locals():
    names = NameSynthesizer()
    existing = frozenset({"repo_find", "repo_find1", "repo_find_get", "value"})
    used = existing | {"value"}
    chosen = []
    previous = None
    for index, method in enumerate(["find", "get", "get"]):
        name, used = names.suggest(index, link(method, "repo", chained=index > 0), USER, "value", previous, used)
        chosen.append(name)
        previous = name
    assert len(set(chosen)) == len(chosen)
    assert not set(chosen) & existing
    assert "value" not in chosen


def test_naming_is_idempotent_for_the_same_inputs():
    names = NameSynthesizer("camel")
    used = frozenset({"repoFind", "repoFind1"})
    first = names.suggest(0, link("find", "repo"), USER, "x", None, used)
    second = names.suggest(0, link("find", "repo"), USER, "x", None, used)
    assert first == second
    assert first[0] == "repoFind2"


def test_unknown_style_is_rejected():
    with pytest.raises(ValueError, match="Unknown naming style"):
        NameSynthesizer("kebab")
