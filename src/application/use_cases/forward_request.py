"""Use case for forwarding an authenticated request to the timesheet API."""
from typing import Optional
import logging

from application.compatibility import MockFallbackPolicy
from application.credentials import resolve_credentials
from application.endpoints import EndpointPolicy
from application.interfaces.services import TimesheetAPIService
from application.use_cases.verify_location import VerifyLocation, read_coordinate
from domain.exceptions import (
    ConfigurationError,
    MissingCredentialsError,
    UpstreamFailureError,
)
from domain.value_objects import Credentials, InboundRequest, UpstreamResponse

GATEWAY_USER_AGENT = "Timesheet-Gateway/1.0.0"


class ForwardRequest:
    """Checks credentials and location, then relays the request upstream."""

    def __init__(
        self,
        api_client: TimesheetAPIService,
        verify_location: VerifyLocation,
        mock_fallback: Optional[MockFallbackPolicy] = None,
    ):
        self._api_client = api_client
        self._verify_location = verify_location
        self._mock_fallback = mock_fallback or MockFallbackPolicy()

    def execute(self, endpoint: EndpointPolicy, upstream_path: str, request: InboundRequest) -> UpstreamResponse:
        """
        Forward one request.

        Args:
            endpoint: Policy of the matched route
            upstream_path: Path on the upstream API, path params already filled in
            request: The inbound request

        Returns:
            The upstream response, or a synthetic success if the mock
            fallback policy covers the upstream status

        Raises:
            MissingCredentialsError: no token and the endpoint requires one
            MissingLocationError: location required but absent or invalid
            LocationRejectedError: location outside every allowed region
            ConfigurationError: no upstream URL configured
            UpstreamFailureError: upstream answered with a non-2xx status
            UpstreamUnreachableError: upstream could not be reached in time
        """
        credentials = resolve_credentials(request)
        logging.info(f"📍 {endpoint.name} request received (user={credentials.user_id}, role={credentials.role})")

        if endpoint.requires_token and not credentials.has_token:
            logging.warning(f"❌ No token provided for {endpoint.name}")
            raise MissingCredentialsError()

        coordinate = read_coordinate(request.body, endpoint.location)
        if coordinate is not None:
            self._verify_location.execute(coordinate)

        if not self._api_client.is_configured:
            logging.error("❌ TIMESHEET_API_URL is not configured!")
            raise ConfigurationError("TIMESHEET_API_URL environment variable is not set")

        headers = self._build_headers(endpoint, credentials, request)

        if endpoint.attendance:
            response = self._api_client.send(
                "POST",
                upstream_path,
                headers,
                json_body=coordinate.to_dict() if coordinate else {},
            )
        else:
            response = self._api_client.send(
                request.method,
                upstream_path,
                headers,
                raw_body=None if request.method.upper() in ("GET", "HEAD") else request.raw_body,
                params=request.query or None,
            )

        logging.info(f"📥 Upstream answered {response.status_code} for {endpoint.name}")

        if response.ok:
            logging.info(f"✅ {endpoint.name} successful")
            return response

        if self._mock_fallback.applies_to(endpoint.attendance, response.status_code):
            logging.warning(
                f"⚠️ MOCK FALLBACK: upstream rejected {endpoint.name} with {response.status_code} "
                f"for token {credentials.masked_token}; answering with a synthetic success"
            )
            return self._mock_fallback.synthetic_response(
                endpoint.name, response.status_code, coordinate, credentials.user_id
            )

        logging.error(f"❌ {endpoint.name} error: {response.status_code} {response.text[:500]}")
        raise UpstreamFailureError(response.status_code, response.body, response.content_type)

    def _build_headers(self, endpoint: EndpointPolicy, credentials: Credentials, request: InboundRequest) -> dict:
        headers = {
            "Accept": request.header("Accept") or "application/json",
            "User-Agent": GATEWAY_USER_AGENT,
        }
        if credentials.token:
            headers["Authorization"] = f"Bearer {credentials.token}"

        if endpoint.attendance:
            headers["Content-Type"] = "application/json"
        else:
            headers["Content-Type"] = request.content_type or "application/json"

        if credentials.role:
            headers["x-user-role"] = credentials.role
        if endpoint.attendance and credentials.user_id:
            headers["x-user-id"] = credentials.user_id

        return headers
