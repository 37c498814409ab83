from atc_booking.services.position_catalog import DEFAULT_POSITIONS


def test_list_positions(client):
    response = client.get("/api/v1/positions")

    assert response.status_code == 200
    positions = response.json()
    assert len(positions) == len(DEFAULT_POSITIONS) + 1
    shared = next(p for p in positions if p["code"] == "TEST_CTR")
    assert shared["capacity"] == 2
    assert shared["required_rating_name"] == "AS1"


def test_get_position(client):
    response = client.get("/api/v1/positions/RKSI_APP")

    assert response.status_code == 200
    assert response.json()["required_rating"] == 5
    assert response.json()["required_rating_name"] == "ADC"


def test_unknown_position(client):
    response = client.get("/api/v1/positions/NOPE_TWR")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "POSITION_NOT_FOUND"


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_metrics_exposes_admission_counters(client):
    client.post("/api/v1/auth/login", json={"vid": "100001"})

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "atc_booking_service_operations_total" in response.text
    assert "atc_booking_admission_decisions_total" in response.text
