"""
Tests for the cache-aside read path.
"""

import threading

import pytest

from stockapp.cache import CacheKeys
from stockapp.config import Settings
from stockapp.exceptions import OperationCancelledError
from stockapp.models import StockMovementType
from stockapp.notifications import ChangeNotifier
from stockapp.search import SearchIndex
from stockapp.services import ProductService, ReadPathOrchestrator, StockMovementService


@pytest.fixture
def settings():
    return Settings(cache_default_ttl=60)


@pytest.fixture
def no_search_path(redis_cache, settings):
    return ReadPathOrchestrator(redis_cache, SearchIndex(None), settings)


@pytest.fixture
def products(test_session, catalog, notifier):
    service = ProductService(test_session, notifier)
    return [
        service.create(
            name=name,
            category_id=catalog["hardware"].id,
            current_purchase_price=1.0,
            current_sale_price=2.0,
            stock_quantity=5,
        )
        for name in ("Vida M8", "Somun M8", "Pul M8")
    ]


class TestCacheAside:
    def test_miss_loads_and_populates_cache(self, test_session, products, no_search_path, redis_cache, fake_redis):
        page = no_search_path.list_products(test_session, page=1, page_size=10)

        key = CacheKeys.products_list(1, 10)
        assert page.total_count == 3
        assert redis_cache.get_json(key)["total_count"] == 3
        assert fake_redis.ttl(key) == 60

    def test_explicit_ttl_wins(self, test_session, products, no_search_path, fake_redis):
        no_search_path.list_products(test_session, ttl=5)

        assert fake_redis.ttl(CacheKeys.products_list(1, 10)) == 5

    def test_hit_does_not_touch_primary_store(self, test_session, products, no_search_path, redis_cache):
        first = no_search_path.list_products(test_session)
        redis_cache.set_json(
            CacheKeys.products_list(1, 10),
            {**first.model_dump(mode="json"), "total_count": 99},
        )

        assert no_search_path.list_products(test_session).total_count == 99

    def test_invalid_cached_entry_is_a_miss(self, test_session, products, no_search_path, redis_cache):
        redis_cache.set_json(CacheKeys.products_list(1, 10), {"items": "garbage"})

        page = no_search_path.list_products(test_session)

        assert page.total_count == 3

    def test_failing_cache_falls_back_to_primary(self, test_session, products, failing_cache, settings):
        read_path = ReadPathOrchestrator(failing_cache, SearchIndex(None), settings)

        assert read_path.list_products(test_session).total_count == 3

    def test_deleted_product_stays_in_cached_page_until_ttl(
        self, test_session, products, no_search_path, notifier, fake_redis
    ):
        no_search_path.list_products(test_session)

        ProductService(test_session, notifier).delete(products[0].id)

        cached = no_search_path.list_products(test_session)
        assert products[0].id in [p.id for p in cached.items]

        fake_redis.advance(60)
        fresh = no_search_path.list_products(test_session)
        assert products[0].id not in [p.id for p in fresh.items]

    def test_term_without_search_uses_cache_key_with_term(self, test_session, products, no_search_path, redis_cache):
        page = no_search_path.list_products(test_session, search_term="  somun ")

        assert [p.name for p in page.items] == ["Somun M8"]
        assert redis_cache.exists(CacheKeys.products_list(1, 10, search_term="somun"))


class TestSearchRouting:
    def test_term_goes_to_search_index(self, test_session, products, redis_cache, search_index, fake_es, settings):
        read_path = ReadPathOrchestrator(redis_cache, search_index, settings)

        page = read_path.list_products(test_session, search_term="vida")

        assert [p.name for p in page.items] == ["Vida M8"]
        assert fake_es.searches
        assert not redis_cache.exists(CacheKeys.products_list(1, 10, search_term="vida"))

    def test_search_failure_returns_empty_page(self, test_session, products, redis_cache, search_index, fake_es, settings):
        read_path = ReadPathOrchestrator(redis_cache, search_index, settings)
        fake_es.fail = True

        page = read_path.list_products(test_session, search_term="vida", page=2, page_size=5)

        assert page.items == []
        assert page.page == 2
        assert page.page_size == 5

    def test_no_term_reads_primary_even_with_search(self, test_session, products, redis_cache, search_index, fake_es, settings):
        read_path = ReadPathOrchestrator(redis_cache, search_index, settings)

        page = read_path.list_products(test_session)

        assert page.total_count == 3
        assert fake_es.searches == []


class TestStockMovementsAndAttributes:
    def test_filtered_movement_reads_bypass_cache(self, test_session, products, no_search_path, fake_redis):
        keys_before = set(fake_redis.keys())

        page = no_search_path.list_stock_movements(
            test_session, product_id=products[0].id, movement_type=StockMovementType.IN
        )

        assert page.total_count == 1
        assert set(fake_redis.keys()) == keys_before

    def test_unfiltered_movement_reads_are_cached(self, test_session, products, no_search_path, notifier, redis_cache):
        no_search_path.list_stock_movements(test_session)
        StockMovementService(test_session, notifier).create(products[0].id, StockMovementType.OUT, 1)

        assert no_search_path.list_stock_movements(test_session).total_count == 3
        assert redis_cache.exists(CacheKeys.stock_movements_list(1, 10))

    def test_attribute_search_without_index(self, test_session, products, no_search_path):
        page = no_search_path.list_product_attributes(test_session, search_key="renk")

        assert page.total_count == 0


class TestCancellation:
    def test_cancelled_before_primary_read_raises(self, test_session, products, no_search_path):
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            no_search_path.list_products(test_session, cancel_event=cancel_event)

    def test_cancelled_search_raises(self, test_session, redis_cache, search_index, settings):
        read_path = ReadPathOrchestrator(redis_cache, search_index, settings)
        cancel_event = threading.Event()
        cancel_event.set()

        with pytest.raises(OperationCancelledError):
            read_path.list_products(test_session, search_term="vida", cancel_event=cancel_event)

    def test_cache_hit_is_served_even_when_cancelled(self, test_session, products, no_search_path):
        no_search_path.list_products(test_session)
        cancel_event = threading.Event()
        cancel_event.set()

        assert no_search_path.list_products(test_session, cancel_event=cancel_event).total_count == 3
