"""
Tests for log context handling.
"""

import pytest
import structlog

from stockapp.cache import CacheSweeper
from stockapp.logging import bind_context, get_processors, operation_context
from stockapp.search import PRODUCTS
from stockapp.services import ProductService, ReindexService


@pytest.fixture(autouse=True)
def clean_context():
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


class TestOperationContext:
    def test_binds_only_inside_the_block(self):
        bind_context(request_id="abc123")

        with operation_context("reindex", collection=PRODUCTS):
            inside = structlog.contextvars.get_contextvars()

        assert inside == {"request_id": "abc123", "operation": "reindex", "collection": PRODUCTS}
        assert structlog.contextvars.get_contextvars() == {"request_id": "abc123"}

    def test_context_is_cleared_when_the_block_raises(self):
        with pytest.raises(RuntimeError):
            with operation_context("reindex", collection=PRODUCTS):
                raise RuntimeError("schema")

        assert structlog.contextvars.get_contextvars() == {}

    def test_reindex_tags_work_with_collection(
        self, test_session, catalog, notifier, search_index, redis_cache, monkeypatch
    ):
        ProductService(test_session, notifier).create(
            name="Vida",
            category_id=catalog["hardware"].id,
            current_purchase_price=1.0,
            current_sale_price=2.0,
        )
        seen = []
        index_product = search_index.index_product

        def recording_index(product):
            seen.append(dict(structlog.contextvars.get_contextvars()))
            index_product(product)

        monkeypatch.setattr(search_index, "index_product", recording_index)
        ReindexService(search_index, CacheSweeper(redis_cache)).reindex_products(test_session)

        assert seen == [{"operation": "reindex", "collection": PRODUCTS}]


def test_json_output_outside_development():
    processors = get_processors(development=False)

    assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    assert structlog.contextvars.merge_contextvars in processors
