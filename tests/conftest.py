"""
Pytest fixtures for StockApp tests.

The primary store is an in-memory SQLite database. Redis and
Elasticsearch are replaced by small in-memory doubles that speak the
subset of the client APIs the application uses.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("ELASTICSEARCH_URL", "")

from typing import Any, Optional  # noqa: E402

import pytest  # noqa: E402
from elastic_transport import ConnectionError as TransportConnectionError  # noqa: E402
from redis.exceptions import ConnectionError as RedisConnectionError  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from stockapp.cache import RedisCache  # noqa: E402
from stockapp.db import Base, create_db_engine  # noqa: E402
from stockapp.models import Category, Location  # noqa: E402
from stockapp.notifications import ChangeNotifier  # noqa: E402
from stockapp.search import SearchIndex  # noqa: E402


# =============================================================================
# Test doubles
# =============================================================================


class FakeRedis:
    """In-memory stand-in for redis.Redis with a manual clock."""

    def __init__(self):
        self.now = 0.0
        self._data: dict[str, tuple[bytes, Optional[float]]] = {}
        self.deleted: list[str] = []

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _live(self, key: str) -> Optional[bytes]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self.now:
            del self._data[key]
            return None
        return value

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[bytes]:
        return self._live(key)

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = (value if isinstance(value, bytes) else str(value).encode(), None)
        return True

    def setex(self, key: str, ttl: int, value: bytes) -> bool:
        self._data[key] = (value, self.now + ttl)
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self.deleted.append(key)
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    def exists(self, key: str) -> int:
        return 1 if self._live(key) is not None else 0

    def ttl(self, key: str) -> int:
        if self._live(key) is None:
            return -2
        expires_at = self._data[key][1]
        return -1 if expires_at is None else int(expires_at - self.now)

    def keys(self) -> list[str]:
        return [key for key in list(self._data) if self._live(key) is not None]


class FailingRedis:
    """Redis double whose every call fails as if the server were down."""

    def __getattr__(self, name: str):
        def fail(*args: Any, **kwargs: Any):
            raise RedisConnectionError("Connection refused")

        return fail


class FakeIndices:
    def __init__(self, es: "FakeElasticsearch"):
        self.es = es

    def exists(self, index: str) -> bool:
        self.es._check()
        return index in self.es.collections

    def create(self, index: str, settings: Any = None, mappings: Any = None) -> dict:
        self.es._check()
        if self.es.fail_schema:
            raise TransportConnectionError("analysis plugin missing")
        self.es.collections.setdefault(index, {})
        self.es.created.append(index)
        self.es.index_settings[index] = {"settings": settings, "mappings": mappings}
        return {"acknowledged": True, "index": index}

    def delete(self, index: str, ignore_unavailable: bool = False) -> dict:
        self.es._check()
        self.es.collections.pop(index, None)
        self.es.dropped.append(index)
        return {"acknowledged": True}


class FakeElasticsearch:
    """
    In-memory stand-in for the Elasticsearch client.

    Text queries match by case-insensitive substring on the queried
    fields; term filters match exactly; range filters are ignored.
    """

    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self.index_settings: dict[str, dict] = {}
        self.created: list[str] = []
        self.dropped: list[str] = []
        self.searches: list[dict] = []
        self.fail = False
        self.fail_schema = False
        self.fail_ids: set[str] = set()
        self.indices = FakeIndices(self)

    def _check(self) -> None:
        if self.fail:
            raise TransportConnectionError("Connection refused")

    def index(self, index: str, id: str, document: dict, refresh: Any = None) -> dict:
        self._check()
        if id in self.fail_ids:
            raise TransportConnectionError(f"rejected document {id}")
        self.collections.setdefault(index, {})[id] = document
        return {"_id": id, "result": "created"}

    def delete(self, index: str, id: str, refresh: Any = None) -> dict:
        self._check()
        self.collections.get(index, {}).pop(id, None)
        return {"_id": id, "result": "deleted"}

    def count(self, index: str) -> dict:
        self._check()
        return {"count": len(self.collections.get(index, {}))}

    def search(
        self,
        index: str,
        query: dict,
        from_: int = 0,
        size: int = 10,
        sort: Any = None,
        highlight: Any = None,
    ) -> dict:
        self._check()
        self.searches.append({"index": index, "query": query, "from": from_, "size": size, "sort": sort})
        docs = list(self.collections.get(index, {}).values())
        matched = [doc for doc in docs if _matches(query, doc)]
        page = matched[from_:from_ + size]
        return {
            "hits": {
                "total": {"value": len(matched), "relation": "eq"},
                "hits": [{"_id": str(doc["id"]), "_source": doc} for doc in page],
            }
        }


def _matches(query: dict, doc: dict) -> bool:
    if "bool" in query:
        return all(_matches(clause, doc) for clause in query["bool"].get("must", []))
    if "match_all" in query:
        return True
    if "multi_match" in query:
        clause = query["multi_match"]
        needle = clause["query"].lower()
        fields = [f.split("^")[0] for f in clause["fields"]]
        return any(needle in str(doc.get(f) or "").lower() for f in fields)
    if "term" in query:
        field, value = next(iter(query["term"].items()))
        return doc.get(field) == value
    return True


class RecordingBroadcaster:
    def __init__(self):
        self.events: list[tuple[str, Any]] = []

    def publish(self, event_name: str, payload: Any) -> None:
        self.events.append((event_name, payload))

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self.events]


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def test_db():
    """Fresh in-memory database per test."""
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    yield TestingSessionLocal, engine

    engine.dispose()


@pytest.fixture
def test_session(test_db):
    TestingSessionLocal, _ = test_db
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Infrastructure doubles
# =============================================================================


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_cache(fake_redis):
    return RedisCache(client=fake_redis)


@pytest.fixture
def failing_cache():
    return RedisCache(client=FailingRedis())


@pytest.fixture
def fake_es():
    return FakeElasticsearch()


@pytest.fixture
def search_index(fake_es):
    return SearchIndex(fake_es)


@pytest.fixture
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture
def notifier(search_index, broadcaster, redis_cache):
    return ChangeNotifier(search_index, broadcaster, redis_cache)


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def catalog(test_session):
    """Two categories and one location."""
    hardware = Category(name="Hardware")
    paint = Category(name="Paint")
    shelf = Location(name="Shelf A", description="top shelf, left side")
    test_session.add_all([hardware, paint, shelf])
    test_session.commit()
    return {"hardware": hardware, "paint": paint, "shelf": shelf}
