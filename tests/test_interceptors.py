import logging
import re


def test_request_is_logged_with_status_and_timing(client, caplog):
    caplog.set_level(logging.INFO, logger="api.interceptors")

    client.get("/api/v1/health")

    lines = [r.getMessage() for r in caplog.records if r.name == "api.interceptors"]
    assert any(re.fullmatch(r"GET /api/v1/health -> 200 After\.\.\. \d+ms", line) for line in lines)


def test_error_responses_are_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="api.interceptors")

    client.post("/api/v1/posts", json={"title": "t", "content": "c"})

    lines = [r.getMessage() for r in caplog.records if r.name == "api.interceptors"]
    assert any(line.startswith("POST /api/v1/posts -> 401 After...") for line in lines)


def test_envelope_uses_app_json_settings(app, client, tokens):
    app.json.ensure_ascii = False

    res = client.post(
        "/api/v1/posts",
        json={"title": "café", "content": "crème"},
        headers={"Authorization": f"Bearer {tokens.access_token}"},
    )

    assert res.status_code == 201
    assert "café".encode() in res.data
    assert res.get_json()["data"]["title"] == "café"
    assert res.get_json()["statusCode"] == 201
