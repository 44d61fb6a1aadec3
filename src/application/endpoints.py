"""Routing table for the endpoints forwarded to the timesheet API."""
import re
from dataclasses import dataclass
from typing import Optional, Pattern, Tuple

from domain.value_objects import LocationRequirement

ANY_METHOD = "*"


@dataclass(frozen=True)
class EndpointPolicy:
    """How one gateway route is checked and forwarded."""
    name: str
    method: str
    pattern: Pattern
    upstream_path: str
    requires_token: bool = True
    location: LocationRequirement = LocationRequirement.NONE
    # Attendance routes send a sanitized {latitude, longitude} body instead of the inbound one
    attendance: bool = False

    def match(self, method: str, path: str) -> Optional[re.Match]:
        if self.method != ANY_METHOD and self.method != method.upper():
            return None
        return self.pattern.fullmatch(path)

    def build_upstream_path(self, match: re.Match) -> str:
        params = {key: value or "" for key, value in match.groupdict().items()}
        return self.upstream_path.format(**params)


PUNCH_IN = EndpointPolicy(
    name="punchIn",
    method="POST",
    pattern=re.compile(r"/api/v1/attendance/punchIn"),
    upstream_path="/api/v1/attendance/punchIn",
    location=LocationRequirement.REQUIRED,
    attendance=True,
)

PUNCH_OUT = EndpointPolicy(
    name="punchOut",
    method="POST",
    pattern=re.compile(r"/api/v1/attendance/punchOut"),
    upstream_path="/api/v1/attendance/punchOut",
    location=LocationRequirement.OPTIONAL,
    attendance=True,
)

CREATE_TIMESHEET = EndpointPolicy(
    name="createTimesheet",
    method="POST",
    pattern=re.compile(r"/api/v1/timesheet/createTimesheet"),
    upstream_path="/api/v1/timesheet/createTimesheet",
)

GET_TIMESHEET_TYPES = EndpointPolicy(
    name="getTimesheetType",
    method="GET",
    pattern=re.compile(r"/api/v1/timesheet/getTimesheetType"),
    upstream_path="/api/v1/timesheet/getTimesheetType",
)

GET_EMPLOYEE_TIMESHEETS = EndpointPolicy(
    name="getAllTimesheetOfEmployee",
    method="GET",
    pattern=re.compile(r"/api/v1/timesheet/getAllTimesheetOfEmployee/(?P<id>[^/]+)"),
    upstream_path="/api/v1/timesheet/getAllTimesheetOfEmployee/{id}",
)

TIMESHEET_PASSTHROUGH = EndpointPolicy(
    name="timesheetProxy",
    method=ANY_METHOD,
    pattern=re.compile(r"/api/v1/timesheet(?P<rest>/.*)?"),
    upstream_path="/api/v1/timesheet{rest}",
)

# Order matters: specific routes before the pass-through catch-all
FORWARDED_ENDPOINTS: Tuple[EndpointPolicy, ...] = (
    PUNCH_IN,
    PUNCH_OUT,
    CREATE_TIMESHEET,
    GET_TIMESHEET_TYPES,
    GET_EMPLOYEE_TIMESHEETS,
    TIMESHEET_PASSTHROUGH,
)


def match_endpoint(method: str, path: str) -> Optional[Tuple[EndpointPolicy, re.Match]]:
    """Find the first forwarded endpoint matching the request."""
    for endpoint in FORWARDED_ENDPOINTS:
        match = endpoint.match(method, path)
        if match:
            return endpoint, match
    return None
