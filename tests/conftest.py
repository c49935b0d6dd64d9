import pytest

from boxpart.config import Settings, set_settings


@pytest.fixture(autouse=True)
def default_settings():
    previous = set_settings(Settings())
    yield
    set_settings(previous)
