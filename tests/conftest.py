"""Pytest configuration.

Run pytest from this project's root; pythonpath in pyproject.toml puts src/
on the import path.
"""

import pytest

from chainstub.infrastructure.di.container import ChainstubContainer


@pytest.fixture(autouse=True)
def reset_container():
    """Tests never share the global container."""
    ChainstubContainer.reset()
    yield
    ChainstubContainer.reset()
