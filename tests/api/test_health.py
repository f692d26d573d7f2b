def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "ab-test-advisor"
    assert "environment" in data


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["app"] == "A/B Test Advisor"


def test_request_headers(client):
    response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
    assert float(response.headers["X-Process-Time"]) >= 0


def test_generated_request_id(client):
    response = client.get("/api/v1/health")

    assert response.headers["X-Request-ID"]
