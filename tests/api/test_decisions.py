import pytest

SCENARIO_LARGE = {
    "metric": "conversion",
    "variants": [
        {"name": "A", "traffic": 100000, "successes": 5000},
        {"name": "B", "traffic": 100000, "successes": 5500},
    ],
}


def test_decide_two_variants(client):
    response = client.post("/api/v1/decisions", json=SCENARIO_LARGE)

    assert response.status_code == 200
    data = response.json()
    assert data["testKind"] == "z_test"
    assert data["testName"] == "Two-proportion z-test"
    assert data["significant"] is True
    assert data["winner"] == "B"
    assert data["leader"] == "B"
    assert data["pValue"] < 0.05
    assert data["twoVariant"]["diff"]["ciLow"] > 0
    assert data["summary"]["kind"] == "winner"
    assert [v["name"] for v in data["variants"]] == ["A", "B"]
    assert data["variants"][1]["liftRel"] == pytest.approx(0.1)


def test_decide_multi_variant(client):
    response = client.post(
        "/api/v1/decisions",
        json={
            "metric": "ctr",
            "variants": [
                {"name": "A", "traffic": 1000, "successes": 50},
                {"name": "B", "traffic": 1100, "successes": 66},
                {"name": "C", "traffic": 1200, "successes": 84},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["testKind"] == "chi_square"
    assert data["df"] == 2
    assert data["significant"] is False
    assert data["leader"] == "C"
    assert data["winner"] is None
    assert data["note"] is None
    assert data["twoVariant"] is None


def test_decide_defaults_to_conversion(client):
    response = client.post("/api/v1/decisions", json={"variants": SCENARIO_LARGE["variants"]})

    assert response.status_code == 200


def test_decide_trims_names(client):
    response = client.post(
        "/api/v1/decisions",
        json={
            "variants": [
                {"name": "  Control ", "traffic": 1000, "successes": 50},
                {"name": "New", "traffic": 1000, "successes": 60},
            ]
        },
    )

    assert response.status_code == 200
    assert response.json()["variants"][0]["name"] == "Control"


def test_decide_zero_traffic(client):
    response = client.post(
        "/api/v1/decisions",
        json={
            "variants": [
                {"name": "A", "traffic": 100, "successes": 5},
                {"name": "B", "traffic": 0, "successes": 0},
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["testKind"] == "fisher_exact"
    assert data["variants"][1]["ciLow"] == 0.0
    assert data["variants"][1]["ciHigh"] == 0.0


@pytest.mark.parametrize(
    "variants",
    [
        [{"name": "A", "traffic": 100, "successes": 5}],
        [
            {"name": "A", "traffic": 100, "successes": 5},
            {"name": "B", "traffic": 100, "successes": 101},
        ],
        [
            {"name": "A", "traffic": -1, "successes": 0},
            {"name": "B", "traffic": 100, "successes": 5},
        ],
        [
            {"name": "  ", "traffic": 100, "successes": 5},
            {"name": "B", "traffic": 100, "successes": 5},
        ],
        [
            {"name": "A", "traffic": 2_000_000_000, "successes": 5},
            {"name": "B", "traffic": 100, "successes": 5},
        ],
        [{"name": f"V{i}", "traffic": 100, "successes": 5} for i in range(6)],
    ],
)
def test_decide_rejects_invalid_input(client, variants):
    response = client.post("/api/v1/decisions", json={"variants": variants})

    assert response.status_code == 422


def test_decide_rejects_unknown_metric(client):
    response = client.post(
        "/api/v1/decisions", json={"metric": "revenue", "variants": SCENARIO_LARGE["variants"]}
    )

    assert response.status_code == 422


def test_qa_endpoint(client):
    response = client.get("/api/v1/decisions/qa")

    assert response.status_code == 200
    data = response.json()
    assert data["passed"] == 6
    assert data["failed"] == 0
    assert all(case["passed"] for case in data["results"])
    assert all(case["testName"] for case in data["results"])
