from app import create_app

BASE = "/api/unit_converter"


def _client():
    app = create_app("TestingConfig")
    return app.test_client()


def test_categories_endpoint_lists_catalog():
    client = _client()
    response = client.get(f"{BASE}/categories")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert "Temperature" in payload["data"]["categories"]


def test_category_detail_and_unknown_category():
    client = _client()
    detail = client.get(f"{BASE}/categories/electrical").get_json()["data"]
    assert detail["name"] == "Electrical"
    assert detail["homogeneous"] is False
    assert client.get(f"{BASE}/categories/Speed").status_code == 404


def test_convert_endpoint_success():
    client = _client()
    response = client.post(
        f"{BASE}/convert",
        json={"category": "Length", "from_unit": "m", "to_unit": "km", "value": 1000},
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["result"] == "1.000000"


def test_convert_endpoint_reports_invalid_input_as_result():
    client = _client()
    response = client.post(
        f"{BASE}/convert",
        json={"category": "Mass", "from_unit": "kg", "to_unit": "g", "value": "abc"},
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["result"] == "Invalid input"


def test_convert_endpoint_huge_integer_is_invalid_input():
    client = _client()
    response = client.post(
        f"{BASE}/convert",
        json={"category": "Length", "from_unit": "m", "to_unit": "km", "value": 10**400},
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["result"] == "Invalid input"


def test_convert_endpoint_rejects_bad_unit():
    client = _client()
    response = client.post(
        f"{BASE}/convert",
        json={"category": "Length", "from_unit": "m", "to_unit": "bogus", "value": 1},
    )
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "unit_converter.unknown_unit"


def test_convert_endpoint_validates_payload():
    client = _client()
    response = client.post(f"{BASE}/convert", json={"value": 1})
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unit_converter.invalid_request"


def test_session_flow():
    client = _client()
    created = client.post(f"{BASE}/sessions")
    assert created.status_code == 201
    session_id = created.get_json()["session_id"]
    assert created.get_json()["data"]["result"] == "0.001000"

    data = client.post(f"{BASE}/sessions/{session_id}/category", json={"category": "Temperature"}).get_json()["data"]
    assert data["from_unit"]["name"] == "Celsius"

    client.post(f"{BASE}/sessions/{session_id}/input", json={"value": "0"})
    data = client.post(f"{BASE}/sessions/{session_id}/units", json={"from_unit": "Kelvin", "to_unit": "°C"}).get_json()["data"]
    assert data["result"] == "-273.1500"

    missing = client.post(f"{BASE}/sessions/{session_id}/units", json={"to_unit": "Rankine"})
    assert missing.status_code == 400

    assert client.delete(f"{BASE}/sessions/{session_id}").status_code == 200
    assert client.get(f"{BASE}/sessions/{session_id}").status_code == 404
