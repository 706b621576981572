from app import create_app

BASE = "/api/scientific_calculator"


def _client():
    app = create_app("TestingConfig")
    return app.test_client()


def _new_session(client) -> str:
    resp = client.post(f"{BASE}/sessions", json={})
    assert resp.status_code == 201
    return resp.get_json()["session_id"]


def test_evaluate_endpoint():
    client = _client()
    resp = client.post(f"{BASE}/evaluate", json={"expression": "3*4+5"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["success"] is True
    assert data["data"]["result"] == 17
    assert data["data"]["formatted"] == "17"
    assert data["data"]["canonical"] == "((3 * 4) + 5)"


def test_evaluate_endpoint_reports_math_error():
    client = _client()
    resp = client.post(f"{BASE}/evaluate", json={"expression": "1/0"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "scientific_calculator.invalid_expression"


def test_evaluate_endpoint_rejects_deep_nesting():
    client = _client()
    resp = client.post(f"{BASE}/evaluate", json={"expression": "-" * 1000 + "1"})
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "scientific_calculator.invalid_expression"


def test_invalid_request_returns_error():
    client = _client()
    resp = client.post(f"{BASE}/evaluate", json={"expr": "1"})
    assert resp.status_code == 400
    data = resp.get_json()
    assert data["success"] is False
    assert data["error"]["code"] == "scientific_calculator.invalid_request"


def test_plot_endpoint_one_variable():
    client = _client()
    resp = client.post(f"{BASE}/plot", json={"expression": "x^2", "x_min": 0, "x_max": 2, "samples": 2})
    assert resp.status_code == 200
    payload = resp.get_json()["data"]
    assert payload["mode"] == "1d"
    assert payload["y"] == [0.0, 1.0, 4.0]


def test_plot_endpoint_surface():
    client = _client()
    resp = client.post(
        f"{BASE}/plot",
        json={"expression": "x*y", "mode": "2d", "lower": 0, "upper": 1, "step": 1},
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["z"] == [0.0, 0.0, 0.0, 1.0]


def test_session_token_flow():
    client = _client()
    session_id = _new_session(client)
    resp = client.post(
        f"{BASE}/sessions/{session_id}/input",
        json={
            "tokens": [
                {"kind": "digit", "value": "2"},
                {"kind": "operator", "value": "+"},
                {"kind": "digit", "value": "2"},
                {"kind": "evaluate"},
                {"kind": "operator", "value": "+"},
            ]
        },
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["expression"] == "4+"
    assert data["state"] == "editing"
    assert data["history_size"] == 1


def test_invalid_token_batch_is_not_applied():
    client = _client()
    session_id = _new_session(client)
    resp = client.post(
        f"{BASE}/sessions/{session_id}/input",
        json={"tokens": [{"kind": "digit", "value": "7"}, {"kind": "function", "value": "system"}]},
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "scientific_calculator.invalid_token"
    state = client.get(f"{BASE}/sessions/{session_id}").get_json()["data"]
    assert state["display"] == "0"


def test_key_endpoint_and_error_state():
    client = _client()
    session_id = _new_session(client)
    for key in ["9", "/", "0"]:
        client.post(f"{BASE}/sessions/{session_id}/key", json={"key": key})
    resp = client.post(f"{BASE}/sessions/{session_id}/key", json={"key": "Enter"})
    data = resp.get_json()["data"]
    assert data["display"] == "Error"
    assert data["state"] == "error"
    ignored = client.post(f"{BASE}/sessions/{session_id}/key", json={"key": "F1"})
    assert ignored.get_json()["data"]["handled"] is False


def test_history_endpoints():
    client = _client()
    session_id = _new_session(client)
    for text in ("5", "8"):
        client.post(f"{BASE}/sessions/{session_id}/input", json={"kind": "clear"})
        client.post(f"{BASE}/sessions/{session_id}/input", json={"kind": "digit", "value": text})
        client.post(f"{BASE}/sessions/{session_id}/evaluate")

    history = client.get(f"{BASE}/sessions/{session_id}/history").get_json()["data"]
    assert history["limit"] == 20
    assert [item["result"] for item in history["entries"]] == ["8", "5"]

    recalled = client.post(f"{BASE}/sessions/{session_id}/history/recall", json={"index": 1})
    assert recalled.get_json()["data"]["display"] == "5"

    missing = client.post(f"{BASE}/sessions/{session_id}/history/recall", json={"index": 9})
    assert missing.status_code == 404

    cleared = client.post(f"{BASE}/sessions/{session_id}/history/clear")
    assert cleared.get_json()["data"]["entries"] == []


def test_unknown_session_returns_404():
    client = _client()
    resp = client.get(f"{BASE}/sessions/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["error"]["code"] == "scientific_calculator.unknown_session"


def test_delete_session():
    client = _client()
    session_id = _new_session(client)
    assert client.delete(f"{BASE}/sessions/{session_id}").status_code == 200
    assert client.get(f"{BASE}/sessions/{session_id}").status_code == 404
