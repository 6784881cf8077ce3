"""Load [tool.chainstub] from pyproject.toml. Infrastructure I/O only."""

import sys
from pathlib import Path
from typing import Optional

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib


class ConfigFileLoader:
    """Finds the nearest pyproject.toml walking up from a start directory."""

    @staticmethod
    def load_config_from_fs(start: Optional[Path] = None) -> tuple[dict[str, object], Optional[str]]:
        """Return ([tool.chainstub] table, directory holding the pyproject.toml)."""
        current_path = (start or Path.cwd()).resolve()
        empty: dict[str, object] = {}
        while True:
            config_file = current_path / "pyproject.toml"
            if config_file.exists():
                try:
                    with config_file.open("rb") as f:
                        data = toml_lib.load(f)
                    tool_section = data.get("tool", {}) or {}
                    config_dict = tool_section.get("chainstub", {}) or {}
                    return (config_dict, str(current_path))
                except (OSError, toml_lib.TOMLDecodeError):
                    # Keep looking in parent dirs
                    pass
            if current_path.parent == current_path:
                return (empty, None)
            current_path = current_path.parent
