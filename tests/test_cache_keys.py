from datetime import date

from stockapp.cache import CacheKeys


def test_products_list_key_defaults_missing_filters_to_zero():
    assert (
        CacheKeys.products_list(1, 10)
        == "products:list:page:1:size:10:cat:0:loc:0:search:"
    )


def test_products_list_key_carries_every_parameter():
    key = CacheKeys.products_list(2, 20, category_id=3, location_id=4, search_term="vida")

    assert key == "products:list:page:2:size:20:cat:3:loc:4:search:vida"


def test_absent_and_empty_search_term_build_the_same_key():
    assert CacheKeys.products_list(1, 10, search_term=None) == CacheKeys.products_list(
        1, 10, search_term=""
    )


def test_stock_movements_key_uses_iso_dates():
    key = CacheKeys.stock_movements_list(
        1, 10, "vida", start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )

    assert key == "stockmovements:list:page:1:size:10:search:vida:start:2024-01-01:end:2024-01-31"


def test_product_attributes_key():
    assert (
        CacheKeys.product_attributes_list(1, 10, product_id=7, search_key="renk")
        == "productattributes:list:page:1:size:10:product:7:search:renk"
    )
