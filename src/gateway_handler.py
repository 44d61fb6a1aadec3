"""
Mitmproxy addon that fronts the timesheet API for the browser extension.

Handles:
- Credential resolution (Bearer header, request body, session cookie)
- Geofence validation on punch in / punch out
- Forwarding to the upstream timesheet API
- Health, auth and location diagnostics

Run as follows: mitmdump --mode reverse:$TIMESHEET_API_URL -s gateway_handler.py
"""
import logging
from typing import Callable, Optional

from mitmproxy import http
import mitmproxy.proxy.layers.http  # registers the "request" hook that @concurrent looks up
from mitmproxy.script import concurrent

from infrastructure.config import AppConfig
from infrastructure.dependency_container import DependencyContainer
from adapters.inbound import read_request, request_path
from application.credentials import cookie_names, resolve_credentials
from application.endpoints import match_endpoint
from application.use_cases import read_coordinate
from domain.exceptions import GatewayError, MissingLocationError
from domain.value_objects import LocationRequirement


class TimesheetGateway:
    """Main mitmproxy addon for the timesheet gateway."""

    def __init__(self, config: Optional[AppConfig] = None, container: Optional[DependencyContainer] = None):
        self.num = 0

        # Load configuration
        self.config = config or AppConfig.load()

        # Initialize dependency container
        self.container = container or DependencyContainer(self.config)

        # Get use cases
        self.forward_request = self.container.get_forward_request_use_case()
        self.verify_location = self.container.get_verify_location_use_case()

        # Get services
        self.renderer = self.container.get_response_renderer()

        self._local_routes: dict[tuple[str, str], Callable[[http.HTTPFlow], None]] = {
            ("GET", "/health"): self._handle_health,
            ("GET", "/api/v1/auth/test"): self._handle_auth_test,
            ("GET", "/api/v1/office-config"): self._handle_office_config,
            ("GET", "/test-location-validation"): self._handle_location_check,
        }

    @concurrent
    def request(self, flow: http.HTTPFlow):
        """Handle incoming requests off the event loop; upstream calls block."""
        self.handle(flow)

    def handle(self, flow: http.HTTPFlow) -> None:
        """Answer one request. Every request gets a response from the gateway."""
        self.num += 1
        method = flow.request.method.upper()
        path = request_path(flow.request)
        logging.info(f"{method} {path} (flow #{self.num})")

        try:
            local_handler = self._local_routes.get((method, path))
            if local_handler:
                local_handler(flow)
                return

            matched = match_endpoint(method, path)
            if matched is None:
                logging.warning(f"🚨 Route not found: {method} {path}")
                self._respond(flow, self.renderer.render_not_found(method, path))
                return

            endpoint, match = matched
            path_params = {key: value for key, value in match.groupdict().items() if value}
            inbound = read_request(flow.request, path_params)
            response = self.forward_request.execute(endpoint, endpoint.build_upstream_path(match), inbound)
            self._respond(flow, self.renderer.render_upstream(response))

        except GatewayError as e:
            logging.warning(f"❌ {method} {path} -> {e.status_code} {e.error}: {e.message}")
            self._respond(flow, self.renderer.render_error(e))
        except Exception as e:
            logging.exception(f"🚨 Unhandled error for {method} {path}: {e}")
            self._respond(flow, self.renderer.render_internal_error(e))

    def _respond(self, flow: http.HTTPFlow, rendered: tuple[int, bytes, dict]) -> None:
        status_code, body, headers = rendered
        flow.response = http.Response.make(status_code, body, headers)

    def _handle_health(self, flow: http.HTTPFlow) -> None:
        self._respond(flow, self.renderer.render_health())

    def _handle_auth_test(self, flow: http.HTTPFlow) -> None:
        inbound = read_request(flow.request)
        credentials = resolve_credentials(inbound)
        self._respond(flow, self.renderer.render_auth_test(credentials, cookie_names(inbound)))

    def _handle_office_config(self, flow: http.HTTPFlow) -> None:
        self._respond(flow, self.renderer.render_office_config(self.verify_location.policy))

    def _handle_location_check(self, flow: http.HTTPFlow) -> None:
        """Run the geofence for ?lat=..&lng=.. without clocking in."""
        lat = flow.request.query.get("lat")
        lng = flow.request.query.get("lng")

        if not lat or not lng:
            self._respond(flow, self.renderer.render_bad_query(
                "Missing coordinates",
                "Provide lat and lng query parameters",
                example="/test-location-validation?lat=26.257544&lng=73.009617",
            ))
            return

        try:
            coordinate = read_coordinate({"latitude": lat, "longitude": lng}, LocationRequirement.REQUIRED)
        except MissingLocationError as e:
            self._respond(flow, self.renderer.render_bad_query("Invalid coordinates", e.message))
            return

        result = self.verify_location.check(coordinate)
        logging.info(f"📍 Location check ({coordinate.latitude}, {coordinate.longitude}): {result.to_dict()}")
        self._respond(flow, self.renderer.render_location_check(coordinate, result, self.verify_location.policy))


addons = [TimesheetGateway()]
