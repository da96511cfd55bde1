import pytest

from envolve_chat.core.config import AppSettings
from envolve_chat.core.services.command_renderer import CommandRenderer

FIXED_NOW = 1300000000.789
FIXED_MILLIS = 1300000000000


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's own ENVOLVE_CHAT_* values out of the tests."""
    for name in ("ENVOLVE_CHAT_API_KEY", "ENVOLVE_CHAT_API_VERSION", "ENVOLVE_CHAT_SCRIPT_ROOT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def renderer(settings):
    return CommandRenderer(settings, clock=lambda: FIXED_NOW)


@pytest.fixture
def fixed_millis():
    return FIXED_MILLIS
