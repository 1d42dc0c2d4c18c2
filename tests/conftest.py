import os
import sys

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from carver import create_app  # noqa: E402
from carver.routes import generator_api  # noqa: E402


@pytest.fixture()
def test_app():
    app = create_app(
        {
            "TESTING": True,
            "CARVER_GRID_SIZE": 15,
            "CARVER_ROOM_ATTEMPTS": 60,
            "CARVER_MAX_GENERATORS": 4,
        }
    )
    return app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


# ---------------- Additional autouse cleanup ----------------
@pytest.fixture(autouse=True)
def _clear_generator_state():
    """Ensure registered generators and cached dungeons don't leak between tests."""
    generator_api._generators.clear()
    generator_api._dungeon_cache.clear()
    yield
    generator_api._generators.clear()
    generator_api._dungeon_cache.clear()
