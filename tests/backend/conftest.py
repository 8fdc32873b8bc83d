import os
import sys
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.append(PROJECT_ROOT)

from backend.app.database import get_db  # noqa: E402
from backend.app.dependencies import get_cache  # noqa: E402
from backend.app.main import create_app  # noqa: E402


@pytest.fixture
def test_app_client(test_db, search_index, redis_cache) -> Iterator[TestClient]:
    TestingSessionLocal, _ = test_db

    app = create_app(search_index=search_index)

    def override_get_db() -> Iterator[Session]:
        db = TestingSessionLocal()
        try:
            yield db
            db.commit()  # Auto-commit on success like production
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: redis_cache

    with TestClient(app) as client:
        yield client


@pytest.fixture
def seeded_client(test_app_client) -> Iterator[tuple[TestClient, dict]]:
    """Client with one category and one location created through the API."""
    client = test_app_client
    category = client.post("/api/v1/categories", json={"name": "Hardware"}).json()
    location = client.post("/api/v1/locations", json={"name": "Shelf A"}).json()
    yield client, {"category": category, "location": location}
