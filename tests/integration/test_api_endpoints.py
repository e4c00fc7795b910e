"""
Integration tests for all REST API endpoints via TestClient.
"""

import pytest
from fastapi.testclient import TestClient

ISS_PAYLOAD = {
    "latitude": 51.6, "longitude": -122.0,
    "x_eci_km": 6771.5, "y_eci_km": 100.0, "z_eci_km": 200.0,
    "velocity_x": 7.66, "velocity_y": 0.5, "velocity_z": 0.3,
}

CSV_TEXT = "\n".join([
    "latitude,longitude,x_eci,y_eci,z_eci,vel_x,vel_y,vel_z",
    "51.6,-122.0,6771.5,100.0,200.0,7.66,0.5,0.3",
    "1,2,3",
    "80.0,45.0,7071.0,0.0,0.0,0.0,7.45,0.0",
])


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Test client with the real app and default configuration."""
    import satclass.api.main as main
    monkeypatch.setattr(main, "CONFIG_DIR", tmp_path)
    with TestClient(main.app) as c:
        yield c


@pytest.fixture
def auth_client(client):
    r = client.post("/api/auth/login", json={"username": "demo", "password": "demo123"})
    assert r.status_code == 200
    return client


class TestHealthEndpoint:
    def test_health(self, client):
        r = client.get("/api/health")
        assert r.status_code == 200
        data = r.json()
        assert data["status"] == "ok"
        assert data["classes"] == ["ISS", "Sentinel1A"]
        assert data["model_version"] == "1.0.0"


class TestAuthEndpoints:
    def test_login(self, client):
        r = client.post("/api/auth/login", json={"username": "admin", "password": "admin123"})
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Login successful", "user": "admin"}

    def test_login_rejected(self, client):
        r = client.post("/api/auth/login", json={"username": "demo", "password": "wrong"})
        assert r.status_code == 401
        assert r.json()["detail"] == "Invalid username or password"

    def test_session(self, auth_client):
        r = auth_client.get("/api/auth/session")
        assert r.status_code == 200
        assert r.json()["username"] == "demo"

    def test_logout(self, auth_client):
        assert auth_client.post("/api/auth/logout").json() == {"success": True}
        assert auth_client.get("/api/auth/session").status_code == 401

    def test_protected_without_login(self, client):
        assert client.post("/api/predict", json=ISS_PAYLOAD).status_code == 401
        assert client.get("/api/monitoring/stats").status_code == 401


class TestPredictEndpoints:
    def test_predict_iss(self, auth_client):
        r = auth_client.post("/api/predict", json=ISS_PAYLOAD)
        assert r.status_code == 200
        data = r.json()
        assert data["prediction"] == "ISS"
        assert data["matched_rule"] is True
        assert data["confidence"] == pytest.approx(0.90)
        assert data["features"]["altitude"] == "404.19"
        assert len(data["explanation"]) == 5
        assert data["explanation"][0]["feature_key"] == "radial_distance"
        assert data["reference_ranges"]["orbital_type"] == "Inclined orbit"

    def test_predict_fallback(self, auth_client):
        payload = dict(ISS_PAYLOAD, x_eci_km=6921.0, y_eci_km=0.0, z_eci_km=0.0)
        data = auth_client.post("/api/predict", json=payload).json()
        assert data["prediction"] == "Sentinel1A"
        assert data["matched_rule"] is False
        assert data["confidence"] == pytest.approx(0.70)

    def test_predict_validation_errors(self, auth_client):
        payload = dict(ISS_PAYLOAD, latitude=100.0)
        del payload["velocity_z"]
        r = auth_client.post("/api/predict", json=payload)
        assert r.status_code == 422
        detail = r.json()["detail"]
        assert len(detail) == 2
        assert any("Latitude out of range" in e for e in detail)
        assert "Missing required field: velocity_z" in detail

    def test_failed_prediction_logged(self, auth_client):
        auth_client.post("/api/predict", json=dict(ISS_PAYLOAD, latitude=100.0))
        stats = auth_client.get("/api/monitoring/stats").json()
        assert stats["failed_predictions"] == 1

    def test_batch(self, auth_client):
        r = auth_client.post("/api/predict/batch", json={"csv_text": CSV_TEXT})
        assert r.status_code == 200
        data = r.json()
        assert [row["line_number"] for row in data["successes"]] == [2, 4]
        assert data["failures"] == [
            {"line_number": 3, "reason": "Not enough columns (found 3, need 8)"}
        ]
        assert data["stats"]["count_by_class"] == {"ISS": 1, "Sentinel1A": 1}
        assert data["error_summary"] == "Line 3: Not enough columns (found 3, need 8)"

    def test_batch_without_valid_rows(self, auth_client):
        r = auth_client.post("/api/predict/batch", json={"csv_text": "lat,lon\n1,2\n"})
        assert r.status_code == 400
        body = r.json()
        assert body["detail"] == "No valid data rows found in CSV file"
        assert body["failures"][0]["line_number"] == 2

    def test_batch_empty(self, auth_client):
        r = auth_client.post("/api/predict/batch", json={"csv_text": ""})
        assert r.status_code == 400
        assert r.json()["detail"] == "CSV file is empty"


class TestMonitoringEndpoints:
    def test_history_and_stats(self, auth_client):
        auth_client.post("/api/predict", json=ISS_PAYLOAD)
        auth_client.post("/api/predict/batch", json={"csv_text": CSV_TEXT})

        history = auth_client.get("/api/monitoring/history?limit=2").json()
        assert len(history) == 2
        assert history[-1]["prediction"] == "Sentinel1A"

        stats = auth_client.get("/api/monitoring/stats").json()
        assert stats["total_predictions"] == 3
        assert stats["predictions_by_class"] == {"ISS": 2, "Sentinel1A": 1}
        assert stats["success_rate"] == 100.0

    def test_export(self, auth_client):
        auth_client.post("/api/predict", json=ISS_PAYLOAD)
        r = auth_client.get("/api/monitoring/export")
        assert r.status_code == 200
        assert r.headers["content-type"].startswith("text/csv")
        assert "attachment" in r.headers["content-disposition"]
        lines = r.text.split("\n")
        assert lines[0].startswith("Timestamp,Prediction,Confidence")
        assert ",ISS,0.9000," in lines[1]

    def test_clear_history(self, auth_client):
        auth_client.post("/api/predict", json=ISS_PAYLOAD)
        assert auth_client.delete("/api/monitoring/history").json() == {"cleared": 1}
        assert auth_client.get("/api/monitoring/history").json() == []
