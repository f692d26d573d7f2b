PAYLOAD = {
    "metric": "conversion",
    "variants": [
        {"name": "A", "traffic": 100000, "successes": 5000},
        {"name": "B", "traffic": 100000, "successes": 5500},
    ],
}


def test_list_templates(client):
    response = client.get("/api/v1/reports/templates")

    assert response.status_code == 200
    types = [t["type"] for t in response.json()]
    assert types == ["full", "brief"]


def test_get_template(client):
    response = client.get("/api/v1/reports/templates/full")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "A/B Test Results Summary"
    assert data["sections"][0] == "headline"


def test_get_unknown_template(client):
    response = client.get("/api/v1/reports/templates/quarterly")

    assert response.status_code == 404


def test_generate_markdown_report(client):
    response = client.post("/api/v1/reports/generate", json=PAYLOAD)

    assert response.status_code == 200
    data = response.json()
    assert data["templateType"] == "full"
    assert data["outputFormat"] == "markdown"
    assert data["title"] == "A/B Test Results Summary"
    assert data["reportId"]
    assert data["generatedAt"]
    assert "## Variant B is the Winner" in data["content"]
    assert data["decision"]["winner"] == "B"


def test_generate_brief_text_report(client):
    response = client.post(
        "/api/v1/reports/generate?template_type=brief&output_format=text", json=PAYLOAD
    )

    assert response.status_code == 200
    data = response.json()
    assert data["templateType"] == "brief"
    assert data["outputFormat"] == "text"
    assert data["content"].startswith("A/B Test Brief\n")


def test_generate_unknown_template(client):
    response = client.post("/api/v1/reports/generate?template_type=nope", json=PAYLOAD)

    assert response.status_code == 400
    assert "Unknown template type" in response.json()["detail"]


def test_generate_unknown_format(client):
    response = client.post("/api/v1/reports/generate?output_format=pdf", json=PAYLOAD)

    assert response.status_code == 400


def test_generate_invalid_counts(client):
    payload = {"variants": [{"name": "A", "traffic": 10, "successes": 20}, PAYLOAD["variants"][1]]}
    response = client.post("/api/v1/reports/generate", json=payload)

    assert response.status_code == 422
