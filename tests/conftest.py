import pathlib
import site

import pytest
from dbreader.adapters.type_mapping import TypeResolver

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def reset_resolver():
    """Reset the shared type resolver before and after each test to ensure test isolation."""
    TypeResolver._instance = None
    yield
    TypeResolver._instance = None


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
