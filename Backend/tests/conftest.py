import os
import sys

import pytest

# Configuration is read at import time, so point it at SQLite first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SESSION_SECRET"] = "test-secret"
os.environ["RATE_LIMIT_ENABLED"] = "0"

# Ensure the backend root (containing the flat modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from fastapi.testclient import TestClient  # noqa: E402

from app import app  # noqa: E402
from auth import get_authority  # noqa: E402
from database import SessionLocal, engine, init_db  # noqa: E402
from models import Base  # noqa: E402


@pytest.fixture()
def db():
    init_db(engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    return TestClient(app)


@pytest.fixture()
def authority():
    return get_authority()


@pytest.fixture()
def new_player(client):
    """Create a player over HTTP; returns the response body plus auth headers."""
    def _create(name='Player'):
        res = client.post('/api/players', json={'display_name': name})
        assert res.status_code == 201
        body = res.json()
        body['headers'] = {'Authorization': f"Bearer {body['token']}"}
        return body
    return _create
