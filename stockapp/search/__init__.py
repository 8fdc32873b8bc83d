"""
Elasticsearch search index.

Usage:
    from stockapp.search import SearchIndex, create_search_client

    index = SearchIndex(create_search_client())
    page = index.search_products("vida", page=1, page_size=10)
"""

from stockapp.search.client import create_search_client
from stockapp.search.schemas import ALL_COLLECTIONS, PRODUCT_ATTRIBUTES, PRODUCTS, STOCK_MOVEMENTS
from stockapp.search.service import SearchIndex, SearchResult

__all__ = [
    "create_search_client",
    "SearchIndex",
    "SearchResult",
    "PRODUCTS",
    "STOCK_MOVEMENTS",
    "PRODUCT_ATTRIBUTES",
    "ALL_COLLECTIONS",
]
