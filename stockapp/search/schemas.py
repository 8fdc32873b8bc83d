"""
Search collection names, analysis settings and field mappings.

Text fields are indexed with an edge-n-gram analyzer so prefixes match
("vid" finds "vida") and searched with the same chain minus the n-gram
filter. Category and location names are keyword fields used for exact
filtering. A mapping change needs the collection to be deleted and
rebuilt; there is no migration.
"""

from typing import Any

PRODUCTS = "products"
STOCK_MOVEMENTS = "stockmovements"
PRODUCT_ATTRIBUTES = "productattributes"

ALL_COLLECTIONS = (PRODUCTS, STOCK_MOVEMENTS, PRODUCT_ATTRIBUTES)

INDEX_ANALYZER = "autocomplete"
SEARCH_ANALYZER = "autocomplete_search"

ANALYSIS_SETTINGS: dict[str, Any] = {
    "analysis": {
        "filter": {
            "autocomplete_filter": {
                "type": "edge_ngram",
                "min_gram": 1,
                "max_gram": 20,
            }
        },
        "analyzer": {
            INDEX_ANALYZER: {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase", "asciifolding", "autocomplete_filter"],
            },
            SEARCH_ANALYZER: {
                "type": "custom",
                "tokenizer": "standard",
                "filter": ["lowercase", "asciifolding"],
            },
        },
    },
    # 1-20 grams exceed the default max_ngram_diff of 1
    "max_ngram_diff": 19,
}


def _text() -> dict[str, str]:
    return {"type": "text", "analyzer": INDEX_ANALYZER, "search_analyzer": SEARCH_ANALYZER}


_INTEGER = {"type": "integer"}
_FLOAT = {"type": "float"}
_DATE = {"type": "date"}
_KEYWORD = {"type": "keyword"}

PRODUCT_MAPPING: dict[str, Any] = {
    "properties": {
        "name": _text(),
        "description": _text(),
        "stock_code": _text(),
        "category_name": _KEYWORD,
        "location_name": _KEYWORD,
        "id": _INTEGER,
        "category_id": _INTEGER,
        "location_id": _INTEGER,
        "stock_quantity": _INTEGER,
        "low_stock_threshold": _INTEGER,
        "current_purchase_price": _FLOAT,
        "current_sale_price": _FLOAT,
        "created_at": _DATE,
        "updated_at": _DATE,
    }
}

STOCK_MOVEMENT_MAPPING: dict[str, Any] = {
    "properties": {
        "product_name": _text(),
        "category_name": _text(),
        "description": _text(),
        "id": _INTEGER,
        "product_id": _INTEGER,
        "category_id": _INTEGER,
        "quantity": _INTEGER,
        "unit_price": _FLOAT,
        "total_value": _FLOAT,
        "current_stock_quantity": _INTEGER,
        "low_stock_threshold": _INTEGER,
        "type": _KEYWORD,
        "created_at": _DATE,
    }
}

PRODUCT_ATTRIBUTE_MAPPING: dict[str, Any] = {
    "properties": {
        "key": _text(),
        "value": _text(),
        "product_name": _text(),
        "id": _INTEGER,
        "product_id": _INTEGER,
        "created_at": _DATE,
        "updated_at": _DATE,
    }
}

MAPPINGS: dict[str, dict[str, Any]] = {
    PRODUCTS: PRODUCT_MAPPING,
    STOCK_MOVEMENTS: STOCK_MOVEMENT_MAPPING,
    PRODUCT_ATTRIBUTES: PRODUCT_ATTRIBUTE_MAPPING,
}


def mapping_for(collection: str) -> dict[str, Any]:
    """Get the field mapping of a collection."""
    try:
        return MAPPINGS[collection]
    except KeyError:
        raise ValueError(f"Unknown search collection: {collection}") from None
