import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from dungeongen import create_app  # noqa: E402
from dungeongen.routes.dungeon_api import clear_cache  # noqa: E402

# Environment flags that change generation policy; tests opt in explicitly.
_POLICY_ENV = (
    "DUNGEON_OBSTACLE_OVERLAY",
    "DUNGEON_PREFER_DEAD_END_EXIT",
    "DUNGEON_EXIT_DISTANCE",
    "DUNGEON_ENABLE_GENERATION_METRICS",
    "DUNGEON_DISABLE_CACHE",
)


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _clean_policy_env(monkeypatch):
    for key in _POLICY_ENV:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture()
def client(test_app):
    clear_cache()
    yield test_app.test_client()
    clear_cache()


def pytest_configure(config):  # register custom marker
    config.addinivalue_line("markers", "performance: generation timing guardrails")
