"""
Tests for the product, stock movement and attribute endpoints.
"""

from stockapp.cache import CacheKeys
from stockapp.search import PRODUCTS


def create_product(client, refs, name="Vida M8", **overrides):
    payload = {
        "name": name,
        "category_id": refs["category"]["id"],
        "location_id": refs["location"]["id"],
        "current_purchase_price": 2.0,
        "current_sale_price": 3.0,
        "stock_quantity": 10,
    }
    payload.update(overrides)
    response = client.post("/api/v1/products", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestProductEndpoints:
    def test_create_and_get(self, seeded_client, fake_es):
        client, refs = seeded_client

        product = create_product(client, refs)
        fetched = client.get(f"/api/v1/products/{product['id']}").json()

        assert fetched["name"] == "Vida M8"
        assert fetched["category_name"] == "Hardware"
        assert fetched["location_name"] == "Shelf A"
        assert len(fetched["stock_code"]) == 6
        assert str(product["id"]) in fake_es.collections[PRODUCTS]

    def test_list_is_paginated_and_cached(self, seeded_client, redis_cache):
        client, refs = seeded_client
        for i in range(3):
            create_product(client, refs, name=f"Vida {i}")

        response = client.get("/api/v1/products", params={"page": 1, "page_size": 2})

        body = response.json()
        assert response.status_code == 200
        assert body["total_count"] == 3
        assert body["total_pages"] == 2
        assert len(body["items"]) == 2
        assert redis_cache.exists(CacheKeys.products_list(1, 2))

    def test_search_term_uses_index(self, seeded_client, fake_es):
        client, refs = seeded_client
        create_product(client, refs, name="Vida M8")
        create_product(client, refs, name="Somun M8")

        body = client.get("/api/v1/products", params={"search_term": "somun"}).json()

        assert [p["name"] for p in body["items"]] == ["Somun M8"]
        assert fake_es.searches[-1]["index"] == PRODUCTS

    def test_update_and_delete(self, seeded_client):
        client, refs = seeded_client
        product = create_product(client, refs)

        updated = client.put(f"/api/v1/products/{product['id']}", json={"name": "Vida M10"})
        deleted = client.delete(f"/api/v1/products/{product['id']}")
        missing = client.get(f"/api/v1/products/{product['id']}")

        assert updated.json()["name"] == "Vida M10"
        assert updated.json()["current_sale_price"] == 3.0
        assert deleted.json() == {"id": product["id"], "status": "deleted"}
        assert missing.status_code == 404

    def test_invalid_price_is_bad_request(self, seeded_client):
        client, refs = seeded_client

        response = client.post(
            "/api/v1/products",
            json={
                "name": "Vida",
                "category_id": refs["category"]["id"],
                "current_purchase_price": 0,
                "current_sale_price": 1,
            },
        )

        assert response.status_code == 400
        assert "greater than zero" in response.json()["detail"]

    def test_unknown_category_is_not_found(self, seeded_client):
        client, refs = seeded_client

        response = client.post(
            "/api/v1/products",
            json={"name": "Vida", "category_id": 999, "current_purchase_price": 1, "current_sale_price": 1},
        )

        assert response.status_code == 404

    def test_reindex_and_counts(self, seeded_client, fake_es):
        client, refs = seeded_client
        create_product(client, refs)
        fake_es.collections[PRODUCTS] = {}

        summary = client.post("/api/v1/products/reindex").json()
        counts = client.get("/api/v1/products/index-counts").json()

        assert summary["indexed_count"] == 1
        assert summary["failed_count"] == 0
        assert summary["total_count"] == 1
        assert counts["counts"][PRODUCTS] == 1

    def test_reindex_schema_failure_is_bad_request(self, seeded_client, fake_es):
        client, _ = seeded_client
        fake_es.fail_schema = True

        response = client.post("/api/v1/products/reindex")

        assert response.status_code == 400


class TestStockMovementEndpoints:
    def test_create_out_movement(self, seeded_client):
        client, refs = seeded_client
        product = create_product(client, refs)

        response = client.post(
            "/api/v1/stock-movements",
            json={"product_id": product["id"], "type": "Out", "quantity": 3, "unit_price": 3.0},
        )

        assert response.status_code == 201
        assert response.json()["current_stock_quantity"] == 7
        assert response.json()["total_value"] == 9.0

    def test_insufficient_stock_is_bad_request(self, seeded_client):
        client, refs = seeded_client
        product = create_product(client, refs, stock_quantity=1)

        response = client.post(
            "/api/v1/stock-movements",
            json={"product_id": product["id"], "type": "Out", "quantity": 5},
        )

        assert response.status_code == 400
        assert "Insufficient stock" in response.json()["detail"]

    def test_list_filters_by_type(self, seeded_client):
        client, refs = seeded_client
        product = create_product(client, refs)
        client.post(
            "/api/v1/stock-movements",
            json={"product_id": product["id"], "type": "Out", "quantity": 1},
        )

        body = client.get("/api/v1/stock-movements", params={"type": "Out"}).json()

        assert body["total_count"] == 1
        assert body["items"][0]["type"] == "Out"


class TestProductAttributeEndpoints:
    def test_crud(self, seeded_client):
        client, refs = seeded_client
        product = create_product(client, refs)

        created = client.post(
            "/api/v1/product-attributes",
            json={"product_id": product["id"], "key": "Renk", "value": "Gri"},
        ).json()
        updated = client.put(
            f"/api/v1/product-attributes/{created['id']}", json={"key": "Renk", "value": "Siyah"}
        ).json()
        listed = client.get("/api/v1/product-attributes", params={"product_id": product["id"]}).json()
        deleted = client.delete(f"/api/v1/product-attributes/{created['id']}")

        assert created["product_name"] == "Vida M8"
        assert updated["value"] == "Siyah"
        assert listed["total_count"] == 1
        assert deleted.status_code == 200
