"""Integration tests for the catalog endpoints."""


class TestProductEndpoints:
    def test_create_and_fetch(self, client):
        response = client.post("/api/products", json={"name": "Buzo", "slug": "buzo", "price": 2500, "stock": 3})
        assert response.status_code == 201
        product_id = response.json()["data"]["id"]

        response = client.get(f"/api/products/{product_id}")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "Buzo"
        assert body["data"]["effective_price"] == 2500

    def test_add_variant(self, client, make_product):
        product_id = make_product()
        response = client.post(f"/api/products/{product_id}/variants", json={"color": "Rojo", "size": "4", "stock": 2})
        assert response.status_code == 201

        data = client.get(f"/api/products/{product_id}").json()["data"]
        assert data["variants"][0]["color"] == "Rojo"
        assert data["total_stock"] == 2

    def test_listing_with_query_filters(self, client, make_product):
        make_product(name="Campera", price=5000.0)
        make_product(name="Medias", price=300.0)

        response = client.get("/api/products", params={"sort": "price_desc", "limit": 1})
        data = response.json()["data"]
        assert data["total"] == 2
        assert data["pages"] == 2
        assert data["items"][0]["name"] == "Campera"

    def test_stats(self, client, make_product):
        make_product(stock=0)
        response = client.get("/api/products/stats")
        assert response.json()["data"]["out_of_stock"] == 1

    def test_missing_product_envelope(self, client):
        response = client.get("/api/products/missing")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "Producto no encontrado: missing",
            "code": "NOT_FOUND",
            "status": 404,
        }

    def test_duplicate_slug_is_conflict(self, client):
        client.post("/api/products", json={"name": "Buzo", "slug": "buzo", "price": 10})
        response = client.post("/api/products", json={"name": "Buzo 2", "slug": "buzo", "price": 10})
        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"


class TestCategoryEndpoints:
    def test_create_category(self, client):
        response = client.post("/api/categories", json={"name": "Bebés", "slug": "bebes"})
        assert response.status_code == 201
        assert response.json()["data"]["id"]
