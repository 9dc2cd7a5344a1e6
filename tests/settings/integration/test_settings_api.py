"""Integration tests for the settings endpoints."""


class TestSettingsApi:
    def test_read_defaults(self, client):
        response = client.get("/api/settings/home")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"hero_title": "Rastuci", "hero_subtitle": "Ropa para chicos"}}

    def test_write_then_read(self, client):
        response = client.put("/api/settings/home", json={"hero_subtitle": "Invierno 2026"})
        assert response.status_code == 200
        assert response.json()["data"]["hero_title"] == "Rastuci"

        assert client.get("/api/settings/home").json()["data"]["hero_subtitle"] == "Invierno 2026"

    def test_saved_shipping_options_are_served(self, client):
        options = [
            {"id": "pickup", "name": "Retiro", "description": "En el local", "price": 0, "estimated_days": "Inmediato"},
            {"id": "standard", "name": "Estándar", "description": "A domicilio", "price": 1800, "estimated_days": "3-5"},
        ]
        assert client.put("/api/settings/shipping_options", json=options).status_code == 200
        assert client.get("/api/shipping/options").json()["data"] == options

    def test_invalid_shipping_options(self, client):
        response = client.put("/api/settings/shipping_options", json=[])
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_key(self, client):
        response = client.get("/api/settings/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False
