"""Pytest configuration and shared fixtures for unit tests."""
import json

import pytest
import requests

from domain.entities import GeoRegion, GeofencePolicy
from domain.value_objects import Coordinate, InboundRequest, UpstreamResponse

# Jodhpur office used throughout the examples
OFFICE_LAT = 26.257544
OFFICE_LNG = 73.009617


class FakeTimesheetAPI:
    """In-memory stand-in for TimesheetAPIClient that records every call."""

    def __init__(self, response=None, error=None, configured=True):
        self.response = response or UpstreamResponse(200, b'{"success": true}', "application/json")
        self.error = error
        self.configured = configured
        self.calls = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def send(self, method, path, headers, json_body=None, raw_body=None, params=None):
        self.calls.append({
            "method": method,
            "path": path,
            "headers": headers,
            "json_body": json_body,
            "raw_body": raw_body,
            "params": params,
        })
        if self.error:
            raise self.error
        return self.response


def make_requests_response(status_code: int, payload, content_type: str = "application/json") -> requests.Response:
    """Build a requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    if isinstance(payload, (dict, list)):
        response._content = json.dumps(payload).encode("utf-8")
    else:
        response._content = payload.encode("utf-8") if isinstance(payload, str) else payload
    response.headers["Content-Type"] = content_type
    return response


@pytest.fixture
def office():
    return GeoRegion(name="Office", center=Coordinate(OFFICE_LAT, OFFICE_LNG), radius_meters=100)


@pytest.fixture
def office_policy(office):
    return GeofencePolicy(regions=(office,))


@pytest.fixture
def fake_api():
    return FakeTimesheetAPI()


@pytest.fixture
def make_request():
    """Factory for InboundRequest objects with JSON bodies."""
    def _make(
        headers=None,
        body=None,
        path_params=None,
        method="POST",
        path="/api/v1/attendance/punchIn",
        query=None,
    ) -> InboundRequest:
        body = body if body is not None else {}
        return InboundRequest(
            method=method,
            path=path,
            headers=headers or {},
            body=body,
            path_params=path_params or {},
            query=query or {},
            raw_body=json.dumps(body).encode("utf-8") if body else b"",
            content_type="application/json",
        )
    return _make


@pytest.fixture
def make_api():
    """Factory for FakeTimesheetAPI with a canned response or error."""
    return FakeTimesheetAPI


@pytest.fixture
def requests_response():
    """Factory for canned requests.Response objects."""
    return make_requests_response
