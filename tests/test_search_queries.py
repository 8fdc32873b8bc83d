"""
Tests for search query bodies.
"""

from datetime import date

from stockapp.search import queries


def _multi_match(body):
    return body["bool"]["must"][0]["multi_match"]


class TestTextMatch:
    def test_short_term_matches_exactly_on_any_field(self):
        clause = queries.text_match("abc", queries.PRODUCT_FIELDS)["multi_match"]

        assert clause["fuzziness"] == "0"
        assert clause["operator"] == "or"
        assert clause["minimum_should_match"] == "1"

    def test_long_term_is_fuzzy_and_strict(self):
        clause = queries.text_match("vidalar", queries.PRODUCT_FIELDS)["multi_match"]

        assert clause["fuzziness"] == "AUTO"
        assert clause["operator"] == "and"
        assert clause["minimum_should_match"] == "75%"

    def test_length_is_measured_after_trimming(self):
        clause = queries.text_match("  ab  ", queries.PRODUCT_FIELDS)["multi_match"]

        assert clause["query"] == "ab"
        assert clause["fuzziness"] == "0"

    def test_four_characters_is_long(self):
        assert queries.is_short_term("vida") is False
        assert queries.is_short_term("vid") is True


class TestProductQuery:
    def test_fields_are_boosted(self):
        clause = _multi_match(queries.product_query("vida"))

        assert clause["fields"] == ["name^3", "description^2", "category_name^2", "stock_code^1.5"]

    def test_no_term_matches_everything(self):
        body = queries.product_query(None)

        assert body["bool"]["must"] == [{"match_all": {}}]

    def test_filters_are_added(self):
        body = queries.product_query("vida", category_id=1, location_id=2)

        assert {"term": {"category_id": 1}} in body["bool"]["must"]
        assert {"term": {"location_id": 2}} in body["bool"]["must"]


class TestStockMovementQuery:
    def test_date_range_covers_whole_end_day(self):
        body = queries.stock_movement_query(
            None, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
        )

        bounds = body["bool"]["must"][1]["range"]["created_at"]
        assert bounds == {"gte": "2024-01-01T00:00:00", "lt": "2024-02-01T00:00:00"}

    def test_type_filter(self):
        body = queries.stock_movement_query("vida", movement_type="Out")

        assert {"term": {"type": "Out"}} in body["bool"]["must"]
        assert _multi_match(body)["fields"] == ["product_name^3", "category_name^2", "description"]


def test_attribute_query_fields():
    clause = _multi_match(queries.product_attribute_query("renk", product_id=3))

    assert clause["fields"] == ["product_name^3", "key^2", "value^2"]


def test_recency_sort_prefers_updated_at():
    sort = queries.recency_sort()[0]["_script"]

    assert sort["order"] == "desc"
    assert "updated_at" in sort["script"]["source"]
    assert "created_at" in sort["script"]["source"]
