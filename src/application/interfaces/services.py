"""Service interfaces (protocols) for the application layer."""
from typing import Protocol, Optional

from domain.value_objects import UpstreamResponse


class TimesheetAPIService(Protocol):
    """Interface for the upstream timesheet API."""

    @property
    def is_configured(self) -> bool:
        """Whether an upstream base URL is set."""
        ...

    def send(
        self,
        method: str,
        path: str,
        headers: dict,
        json_body: Optional[dict] = None,
        raw_body: Optional[bytes] = None,
        params: Optional[dict] = None,
    ) -> UpstreamResponse:
        """Send one request upstream and return its response."""
        ...
