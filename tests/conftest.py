import os
import sys

# Ensure project root is on sys.path so tests can import the `statline` package
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
from statline import create_app
from statline.retention import RetentionPolicy
from statline.state import DashboardState


@pytest.fixture
def app():
    return create_app({"TESTING": True, "API_KEY": None})


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def state():
    # Units are arbitrary; tests use millisecond-like numbers
    return DashboardState(RetentionPolicy(window_length=1000, cleanup_interval=500))
