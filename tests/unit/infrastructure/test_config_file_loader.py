"""Unit tests for ConfigFileLoader."""

from chainstub.infrastructure.config_file_loader import ConfigFileLoader


def test_finds_nearest_pyproject_walking_up(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[tool.chainstub]\nnaming = "camel"\n', encoding="utf-8")
    nested = tmp_path / "tests" / "unit"
    nested.mkdir(parents=True)

    config, root = ConfigFileLoader.load_config_from_fs(nested)

    assert config == {"naming": "camel"}
    assert root == str(tmp_path.resolve())


def test_pyproject_without_table_gives_empty_config(tmp_path):
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n', encoding="utf-8")
    config, root = ConfigFileLoader.load_config_from_fs(tmp_path)
    assert config == {}
    assert root == str(tmp_path.resolve())


def test_invalid_toml_is_skipped_for_parent(tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.chainstub]\nnaming = 'snake'\n", encoding="utf-8")
    child = tmp_path / "child"
    child.mkdir()
    (child / "pyproject.toml").write_text("[tool\n", encoding="utf-8")

    config, root = ConfigFileLoader.load_config_from_fs(child)

    assert config == {"naming": "snake"}
    assert root == str(tmp_path.resolve())
