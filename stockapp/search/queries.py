"""
Query body builders for the search collections.

Text matching depends on the term length: terms of up to three
characters match exactly on any field (``fuzziness`` 0, OR, at least one
clause), longer terms allow automatic edit distance but need every term
and 75% of clauses to match.
"""

from datetime import date, datetime, time, timedelta
from typing import Any, Optional

SHORT_TERM_MAX_LENGTH = 3

PRODUCT_FIELDS = ["name^3", "description^2", "category_name^2", "stock_code^1.5"]
STOCK_MOVEMENT_FIELDS = ["product_name^3", "category_name^2", "description"]
PRODUCT_ATTRIBUTE_FIELDS = ["product_name^3", "key^2", "value^2"]

RECENCY_SCRIPT = (
    "if (doc['updated_at'].size() > 0) { return doc['updated_at'].value.toInstant().toEpochMilli(); } "
    "else { return doc['created_at'].value.toInstant().toEpochMilli(); }"
)


def is_short_term(term: str) -> bool:
    return len(term.strip()) <= SHORT_TERM_MAX_LENGTH


def text_match(term: str, fields: list[str]) -> dict[str, Any]:
    """
    Build the multi_match clause for a free-text term.

    Args:
        term: User-entered search text
        fields: Boosted field list, highest weight first

    Returns:
        multi_match query clause
    """
    term = term.strip()
    short = is_short_term(term)
    return {
        "multi_match": {
            "query": term,
            "fields": fields,
            "type": "best_fields",
            "fuzziness": "0" if short else "AUTO",
            "operator": "or" if short else "and",
            "minimum_should_match": "1" if short else "75%",
        }
    }


def _bool_query(term: Optional[str], fields: list[str], filters: list[dict[str, Any]]) -> dict[str, Any]:
    must: list[dict[str, Any]] = []
    if term and term.strip():
        must.append(text_match(term, fields))
    else:
        must.append({"match_all": {}})
    must.extend(filters)
    return {"bool": {"must": must}}


def _term(field: str, value: Any) -> dict[str, Any]:
    return {"term": {field: value}}


def recency_sort() -> list[dict[str, Any]]:
    """Newest first by updated_at, or created_at when never updated."""
    return [
        {
            "_script": {
                "type": "number",
                "script": {"lang": "painless", "source": RECENCY_SCRIPT},
                "order": "desc",
            }
        }
    ]


def product_query(
    term: Optional[str],
    category_id: Optional[int] = None,
    location_id: Optional[int] = None,
) -> dict[str, Any]:
    filters = []
    if category_id is not None:
        filters.append(_term("category_id", category_id))
    if location_id is not None:
        filters.append(_term("location_id", location_id))
    return _bool_query(term, PRODUCT_FIELDS, filters)


def stock_movement_query(
    term: Optional[str],
    product_id: Optional[int] = None,
    category_id: Optional[int] = None,
    movement_type: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> dict[str, Any]:
    filters = []
    if product_id is not None:
        filters.append(_term("product_id", product_id))
    if category_id is not None:
        filters.append(_term("category_id", category_id))
    if movement_type is not None:
        filters.append(_term("type", movement_type))
    if start_date is not None or end_date is not None:
        bounds: dict[str, str] = {}
        if start_date is not None:
            bounds["gte"] = datetime.combine(start_date, time.min).isoformat()
        if end_date is not None:
            # end date covers the whole day
            bounds["lt"] = datetime.combine(end_date + timedelta(days=1), time.min).isoformat()
        filters.append({"range": {"created_at": bounds}})
    return _bool_query(term, STOCK_MOVEMENT_FIELDS, filters)


def product_attribute_query(term: Optional[str], product_id: Optional[int] = None) -> dict[str, Any]:
    filters = []
    if product_id is not None:
        filters.append(_term("product_id", product_id))
    return _bool_query(term, PRODUCT_ATTRIBUTE_FIELDS, filters)


PRODUCT_HIGHLIGHT = {"fields": {"name": {}, "description": {}}}
STOCK_MOVEMENT_HIGHLIGHT = {"fields": {"product_name": {}, "description": {}}}
PRODUCT_ATTRIBUTE_HIGHLIGHT = {"fields": {"key": {}, "value": {}}}

STOCK_MOVEMENT_SORT = [{"created_at": {"order": "desc"}}]
