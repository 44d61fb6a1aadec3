"""Tests for the mitmproxy gateway addon, driven through real mitmproxy flows."""
import json
from unittest import mock

import pytest
import requests
from mitmproxy import hooks, http
from mitmproxy.test import tflow

from domain.entities import GeofencePolicy
from gateway_handler import TimesheetGateway
from infrastructure.config import AppConfig, CompatibilityConfig, GeofenceConfig, UpstreamConfig

GATEWAY = "http://gateway.local"
UPSTREAM = "https://timesheet.example.com"
AT_OFFICE = {"latitude": 26.257544, "longitude": 73.009617}
AWAY = {"latitude": 26.26, "longitude": 73.02}


def make_flow(method: str, path: str, body=None, headers=None) -> http.HTTPFlow:
    content = json.dumps(body) if body is not None else ""
    all_headers = {"Content-Type": "application/json"} if body is not None else {}
    all_headers.update(headers or {})
    return tflow.tflow(req=http.Request.make(method, f"{GATEWAY}{path}", content, all_headers))


def response_json(flow: http.HTTPFlow) -> dict:
    return json.loads(flow.response.content)


@pytest.fixture
def config(office_policy):
    return AppConfig(
        upstream=UpstreamConfig(base_url=UPSTREAM, timeout_seconds=5),
        geofence=GeofenceConfig(regions=office_policy.regions),
        compatibility=CompatibilityConfig(),
    )


@pytest.fixture
def gateway(config):
    return TimesheetGateway(config=config)


@pytest.fixture
def upstream(requests_response):
    """Patch the outbound HTTP call; yields the mock."""
    with mock.patch.object(requests.Session, "request") as request:
        request.return_value = requests_response(200, {"success": True, "message": "Punched in"})
        yield request


class TestLocalRoutes:
    """Routes answered without the upstream."""

    def test_health(self, gateway):
        flow = make_flow("GET", "/health")

        gateway.handle(flow)

        assert flow.response.status_code == 200
        payload = response_json(flow)
        assert payload["status"] == "ok"
        assert payload["version"] == "1.0.0"

    def test_auth_test_masks_token(self, gateway):
        flow = make_flow("GET", "/api/v1/auth/test", headers={
            "Cookie": "currentUser=%7B%22accessToken%22%3A%22abcdefghijklmnop%22%7D; theme=dark",
            "x-user-role": "Employee",
        })

        gateway.handle(flow)

        auth = response_json(flow)["auth"]
        assert auth["hasToken"] is True
        assert auth["tokenMasked"] == "abcd...mnop"
        assert auth["role"] == "Employee"
        assert auth["cookies"] == ["currentUser", "theme"]
        assert b"abcdefghijklmnop" not in flow.response.content

    def test_auth_test_without_credentials(self, gateway):
        flow = make_flow("GET", "/api/v1/auth/test")

        gateway.handle(flow)

        auth = response_json(flow)["auth"]
        assert auth["hasToken"] is False
        assert auth["tokenMasked"] is None
        assert auth["hasCookies"] is False

    def test_office_config(self, gateway):
        flow = make_flow("GET", "/api/v1/office-config")

        gateway.handle(flow)

        data = response_json(flow)["data"]
        assert data["regions"] == [{
            "name": "Office",
            "latitude": 26.257544,
            "longitude": 73.009617,
            "radius": 100,
            "configured": True,
        }]
        assert data["dynamicMode"] is False

    def test_location_check_inside(self, gateway):
        flow = make_flow("GET", "/test-location-validation?lat=26.257544&lng=73.009617")

        gateway.handle(flow)

        validation = response_json(flow)["validation"]
        assert validation == {"isValid": True, "matchedLocation": "Office", "distance": 0, "allowedRadius": 100}

    def test_location_check_outside(self, gateway):
        flow = make_flow("GET", "/test-location-validation?lat=26.26&lng=73.02")

        gateway.handle(flow)

        validation = response_json(flow)["validation"]
        assert flow.response.status_code == 200
        assert validation["isValid"] is False
        assert validation["closestLocation"] == "Office"
        assert 1060 < validation["distance"] < 1080

    @pytest.mark.parametrize("query, error", [
        ("", "Missing coordinates"),
        ("?lat=26.2", "Missing coordinates"),
        ("?lat=abc&lng=73", "Invalid coordinates"),
    ])
    def test_location_check_bad_query(self, gateway, query, error):
        flow = make_flow("GET", f"/test-location-validation{query}")

        gateway.handle(flow)

        assert flow.response.status_code == 400
        assert response_json(flow)["error"] == error

    def test_unknown_route(self, gateway, upstream):
        flow = make_flow("GET", "/api/v2/nowhere")

        gateway.handle(flow)

        assert flow.response.status_code == 404
        assert response_json(flow)["message"] == "GET /api/v2/nowhere not found"
        upstream.assert_not_called()


class TestPunchIn:
    """End-to-end through the addon with the upstream patched out."""

    def test_success_relays_upstream(self, gateway, upstream):
        flow = make_flow(
            "POST",
            "/api/v1/attendance/punchIn",
            body={**AT_OFFICE, "userId": "686b969f"},
            headers={"Authorization": "Bearer token-abcdefgh", "x-user-role": "Employee"},
        )

        gateway.handle(flow)

        assert flow.response.status_code == 200
        assert response_json(flow) == {"success": True, "message": "Punched in"}
        args, kwargs = upstream.call_args
        assert args == ("POST", f"{UPSTREAM}/api/v1/attendance/punchIn")
        assert kwargs["json"] == AT_OFFICE
        assert kwargs["headers"]["Authorization"] == "Bearer token-abcdefgh"
        assert kwargs["headers"]["x-user-id"] == "686b969f"
        assert kwargs["timeout"] == 5

    def test_missing_credentials(self, gateway, upstream):
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AT_OFFICE)

        gateway.handle(flow)

        assert flow.response.status_code == 401
        assert response_json(flow)["error"] == "Authentication required"
        upstream.assert_not_called()

    def test_missing_location(self, gateway, upstream):
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body={}, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        payload = response_json(flow)
        assert flow.response.status_code == 400
        assert payload["error"] == "Location required"
        assert payload["received"] == {"latitude": None, "longitude": None}
        upstream.assert_not_called()

    def test_location_rejected(self, gateway, upstream):
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AWAY, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        payload = response_json(flow)
        assert flow.response.status_code == 403
        assert payload["error"] == "Location not allowed"
        assert payload["details"]["closestLocation"] == "Office"
        assert payload["details"]["allowedRadius"] == 100
        assert payload["details"]["userLocation"] == AWAY
        assert payload["details"]["validationFailed"] is True
        upstream.assert_not_called()

    def test_upstream_error_is_relayed_verbatim(self, gateway, upstream, requests_response):
        upstream.return_value = requests_response(409, {"message": "Already punched in today"})
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AT_OFFICE, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        assert flow.response.status_code == 409
        assert response_json(flow) == {"message": "Already punched in today"}

    def test_upstream_unreachable(self, gateway, upstream):
        upstream.side_effect = requests.ConnectionError("connection refused")
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AT_OFFICE, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        assert flow.response.status_code == 502
        assert response_json(flow)["error"] == "Upstream unreachable"

    def test_mock_fallback(self, config, upstream, requests_response):
        config = AppConfig(
            upstream=config.upstream,
            geofence=config.geofence,
            compatibility=CompatibilityConfig(mock_statuses=frozenset({400})),
        )
        gateway = TimesheetGateway(config=config)
        upstream.return_value = requests_response(400, {"message": "Invalid shift"})
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AT_OFFICE, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        payload = response_json(flow)
        assert flow.response.status_code == 200
        assert payload["mock"] is True
        assert payload["upstreamStatus"] == 400

    def test_dynamic_mode_with_no_regions(self, upstream):
        config = AppConfig(
            upstream=UpstreamConfig(base_url=UPSTREAM),
            geofence=GeofenceConfig(regions=(), dynamic_mode=True),
            compatibility=CompatibilityConfig(),
        )
        gateway = TimesheetGateway(config=config)
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AWAY, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        assert flow.response.status_code == 200
        assert upstream.call_args.kwargs["json"] == AWAY

    def test_unconfigured_upstream(self, office_policy, upstream):
        config = AppConfig(
            upstream=UpstreamConfig(base_url=""),
            geofence=GeofenceConfig(regions=office_policy.regions),
            compatibility=CompatibilityConfig(),
        )
        gateway = TimesheetGateway(config=config)
        flow = make_flow("POST", "/api/v1/attendance/punchIn", body=AT_OFFICE, headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        assert flow.response.status_code == 500
        assert response_json(flow)["error"] == "Server configuration error"
        upstream.assert_not_called()


class TestTimesheetRoutes:
    """Non-geofenced forwarding."""

    def test_employee_timesheets_use_path_id(self, gateway, upstream, requests_response):
        upstream.return_value = requests_response(200, {"data": []})
        flow = make_flow(
            "GET",
            "/api/v1/timesheet/getAllTimesheetOfEmployee/686b969f",
            headers={"Cookie": "currentUser=%7B%22accessToken%22%3A%22abc123%22%7D"},
        )

        gateway.handle(flow)

        args, kwargs = upstream.call_args
        assert flow.response.status_code == 200
        assert args == ("GET", f"{UPSTREAM}/api/v1/timesheet/getAllTimesheetOfEmployee/686b969f")
        assert kwargs["headers"]["Authorization"] == "Bearer abc123"
        assert kwargs["data"] is None

    def test_passthrough_keeps_method_body_and_content_type(self, gateway, upstream, requests_response):
        upstream.return_value = requests_response(200, "<p>ok</p>", content_type="text/html")
        flow = make_flow(
            "PATCH",
            "/api/v1/timesheet/updateTimesheet/9?notify=true",
            body={"hours": 4},
            headers={"Authorization": "Bearer t-123456789"},
        )

        gateway.handle(flow)

        args, kwargs = upstream.call_args
        assert args == ("PATCH", f"{UPSTREAM}/api/v1/timesheet/updateTimesheet/9")
        assert json.loads(kwargs["data"]) == {"hours": 4}
        assert kwargs["params"] == {"notify": "true"}
        assert flow.response.headers["Content-Type"] == "text/html"
        assert flow.response.content == b"<p>ok</p>"

    def test_unexpected_exception_becomes_500(self, gateway, upstream):
        upstream.side_effect = RuntimeError("boom")
        flow = make_flow("GET", "/api/v1/timesheet/getTimesheetType", headers={"Authorization": "Bearer t-123456789"})

        gateway.handle(flow)

        assert flow.response.status_code == 500
        assert response_json(flow) == {"error": "Internal server error", "message": "boom"}


def test_request_hook_is_registered_for_concurrent():
    assert "request" in hooks.all_hooks
    assert callable(TimesheetGateway.request)


def test_gateway_uses_configured_policy(gateway):
    assert isinstance(gateway.verify_location.policy, GeofencePolicy)
    assert gateway.verify_location.policy.regions[0].name == "Office"
