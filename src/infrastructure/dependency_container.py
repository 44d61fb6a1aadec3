"""Dependency injection container."""
from infrastructure.config import AppConfig
from adapters.external_services import TimesheetAPIClient
from adapters.presentation import JSONResponseRenderer
from application.use_cases import ForwardRequest, VerifyLocation


class DependencyContainer:
    """Dependency injection container for the application."""

    def __init__(self, config: AppConfig):
        self._config = config
        self._instances = {}

    @property
    def config(self) -> AppConfig:
        return self._config

    def get_timesheet_api_client(self) -> TimesheetAPIClient:
        """Get timesheet API client instance."""
        if 'timesheet_api' not in self._instances:
            self._instances['timesheet_api'] = TimesheetAPIClient(
                self._config.upstream.base_url,
                timeout=self._config.upstream.timeout_seconds
            )
        return self._instances['timesheet_api']

    def get_response_renderer(self) -> JSONResponseRenderer:
        """Get response renderer instance."""
        if 'response_renderer' not in self._instances:
            self._instances['response_renderer'] = JSONResponseRenderer(self._config.version)
        return self._instances['response_renderer']

    def get_verify_location_use_case(self) -> VerifyLocation:
        """Get VerifyLocation use case instance."""
        if 'verify_location' not in self._instances:
            self._instances['verify_location'] = VerifyLocation(
                self._config.geofence.policy
            )
        return self._instances['verify_location']

    def get_forward_request_use_case(self) -> ForwardRequest:
        """Get ForwardRequest use case instance."""
        if 'forward_request' not in self._instances:
            self._instances['forward_request'] = ForwardRequest(
                self.get_timesheet_api_client(),
                self.get_verify_location_use_case(),
                self._config.compatibility.mock_fallback
            )
        return self._instances['forward_request']
