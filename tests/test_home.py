from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert titles == ["Matrix Workbench", "Scientific Calculator", "Unit Converter"]
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_request_id_is_echoed():
    client = create_app("TestingConfig").test_client()
    response = client.get("/healthz", headers={"X-Request-ID": "abc123"})
    assert response.get_json()["data"] == {"status": "ok"}
    assert response.headers["X-Request-ID"] == "abc123"


def test_unknown_route_uses_error_envelope():
    client = create_app("TestingConfig").test_client()
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "not_found"


def test_plugin_settings_come_from_config_yml():
    app = create_app("TestingConfig")
    assert app.config["PLUGIN_SETTINGS"]["scientific_calculator"]["history_limit"] == 20
    assert app.config["SITE_SETTINGS"]["session_ttl_minutes"] == 30
