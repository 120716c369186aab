from core.config import CorsSettings
from services.responders import PreflightResponder, json_error


def test_json_error_defaults():
    response = json_error()
    assert response.status_code == 404
    assert response.body == b'{"error":"not found"}'
    assert response.headers["content-type"] == "application/json"


def test_json_error_custom_status():
    response = json_error("origin not allowed", 403)
    assert response.status_code == 403
    assert response.body == b'{"error":"origin not allowed"}'


def test_real_preflight_echoes_request():
    response = PreflightResponder(CorsSettings()).respond(
        {
            "origin": "http://localhost:3000",
            "access-control-request-method": "GET",
            "access-control-request-headers": "x-proxy-referer,x-proxy-cookie",
        }
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert response.headers["access-control-allow-methods"] == "GET"
    assert response.headers["access-control-allow-headers"] == "x-proxy-referer,x-proxy-cookie"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_plain_options_lists_methods():
    response = PreflightResponder(CorsSettings()).respond({"origin": "http://localhost:3000"})
    assert response.status_code == 200
    assert response.headers["allow"] == "GET, HEAD, POST, OPTIONS"
    assert "access-control-allow-origin" not in response.headers


def test_options_without_origin_lists_methods():
    response = PreflightResponder(CorsSettings()).respond({})
    assert response.headers["allow"] == "GET, HEAD, POST, OPTIONS"


def test_disallowed_origin_is_forbidden():
    response = PreflightResponder(CorsSettings()).respond(
        {
            "origin": "https://evil.test",
            "access-control-request-method": "GET",
            "access-control-request-headers": "x-proxy-cookie",
        }
    )
    assert response.status_code == 403
    assert response.body == b'{"error":"origin not allowed"}'
