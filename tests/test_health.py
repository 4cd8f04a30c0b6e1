from fastapi.testclient import TestClient

from app.main import app
from infrastructure.metrics import metrics


def test_health_returns_ok(monkeypatch):
    monkeypatch.setenv("APP__SERVICE_NAME", "food-order-service-test")
    client = TestClient(app)

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["service"] == "food-order-service-test"
    assert body["status"] == "ok"


def test_metrics_endpoint_exposes_counters():
    client = TestClient(app)
    before = metrics.get("orders_placed_total")

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "# TYPE orders_placed_total counter" in response.text
    assert f"orders_placed_total {before}" in response.text
